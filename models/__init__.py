from models.timeslot import TimeSlot
from models.course import Course
from models.grade import Grade
from models.school_class import SchoolClass
from models.teacher import Teacher
from models.subject import Subject
from models.room import Room
from models.project import (
    Project,
    ProjectError,
    CourseNotFoundError,
    DuplicateCourseError,
    GradeNotFoundError,
    DuplicateClassNumberError,
)

__all__ = [
    "TimeSlot",
    "Course",
    "Grade",
    "SchoolClass",
    "Teacher",
    "Subject",
    "Room",
    "Project",
    "ProjectError",
    "CourseNotFoundError",
    "DuplicateCourseError",
    "GradeNotFoundError",
    "DuplicateClassNumberError",
]
