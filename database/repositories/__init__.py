from database.repositories.base import BaseRepository
from database.repositories.course import CourseRepository
from database.repositories.student import StudentRepository
from database.repositories.course_task import CourseTaskRepository
from database.repositories.mentor import MentorRepository

__all__ = [
    'BaseRepository',
    'CourseRepository',
    'StudentRepository',
    'CourseTaskRepository',
    'MentorRepository',
]
