from pydantic import BaseModel

UNKNOWN = "Unknown"


class ResolvedAddress(BaseModel):
    label: str = UNKNOWN
    latitude: float
    longitude: float
    country: str = UNKNOWN
    region: str = UNKNOWN
    city: str = UNKNOWN
    neighbourhood: str = UNKNOWN
    postcode: str = UNKNOWN

    model_config = {"frozen": True}
