from __future__ import annotations

from typing import Annotated

from pydantic import Field, StringConstraints

# Leave type keys are case-insensitive identifiers such as "casual" or "sick".
LeaveTypeName = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1, max_length=50)]
Entitlement = Annotated[int, Field(ge=0, description="Annual allowance in working days")]
