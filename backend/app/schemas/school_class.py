from pydantic import BaseModel, Field


class SchoolClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    room_number: str | None = Field(default=None, max_length=50)


class SchoolClassOut(SchoolClassCreate):
    id: str

    model_config = {"from_attributes": True}
