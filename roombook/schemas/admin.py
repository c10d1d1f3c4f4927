from pydantic import BaseModel, EmailStr, Field


class AdminBase(BaseModel):
    name: str
    email: EmailStr

    model_config = {"from_attributes": True}


class AdminCreate(AdminBase):
    password: str = Field(min_length=8)


class AdminLogin(BaseModel):
    email: EmailStr
    password: str


class AdminOut(AdminBase):
    id: int
