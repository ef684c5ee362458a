from pydantic import BaseModel, EmailStr, Field


class TeacherCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    department: str | None = Field(default=None, max_length=200)
    user_id: str | None = Field(default=None, max_length=36)


class TeacherOut(TeacherCreate):
    id: str

    model_config = {"from_attributes": True}
