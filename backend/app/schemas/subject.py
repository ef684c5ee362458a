from pydantic import BaseModel, Field, field_validator


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=50)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Subject code cannot be blank")
        return code


class SubjectOut(SubjectCreate):
    id: str

    model_config = {"from_attributes": True}
