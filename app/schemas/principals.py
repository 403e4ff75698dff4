from pydantic import BaseModel


# Role and tier stay plain strings so unknown values reach the service and
# come back as InvalidArgument rather than a schema error.
class SetRoleRequest(BaseModel):
    role: str


class SetTierRequest(BaseModel):
    merchant_tier: str
