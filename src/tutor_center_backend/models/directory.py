'''
Teacher and Classroom API Models
'''
from pydantic import BaseModel, ConfigDict


class Teacher(BaseModel):
    id: str
    name: str = ""

    model_config = ConfigDict(from_attributes=True)

class TeacherCreate(BaseModel):
    name: str

class Classroom(BaseModel):
    id: str
    classroom_id: str = ""

    model_config = ConfigDict(from_attributes=True)

class ClassroomCreate(BaseModel):
    classroom_id: str
