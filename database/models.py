import datetime

from sqlalchemy import (
    Column, Integer, Boolean, Text, ForeignKey, TIMESTAMP, Float,
    UniqueConstraint, Index
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Course(Base):
    __tablename__ = 'course'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_date = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)

    stages = relationship("Stage", back_populates="course", cascade="all, delete-orphan")
    students = relationship("Student", back_populates="course")
    mentors = relationship("Mentor", back_populates="course")

    __table_args__ = (
        Index('idx_course_completed', 'completed'),
    )


class Stage(Base):
    """A phase of a course; course tasks are scoped to a stage."""
    __tablename__ = 'stage'

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey('course.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='open')  # open | closed
    closed_date = Column(TIMESTAMP(timezone=True))

    course = relationship("Course", back_populates="stages")
    course_tasks = relationship("CourseTask", back_populates="stage")


class CourseTask(Base):
    __tablename__ = 'course_task'

    id = Column(Integer, primary_key=True)
    stage_id = Column(Integer, ForeignKey('stage.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    max_score = Column(Integer)
    score_weight = Column(Float, default=1)
    checker = Column(Text, nullable=False, default='mentor')  # mentor | crossCheck | auto-test

    stage = relationship("Stage", back_populates="course_tasks")
    task_results = relationship("TaskResult", back_populates="course_task")
    task_checkers = relationship("TaskChecker", back_populates="course_task", cascade="all, delete-orphan")


class Mentor(Base):
    __tablename__ = 'mentor'

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey('course.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    is_expelled = Column(Boolean, nullable=False, default=False)
    max_students_limit = Column(Integer, nullable=False, default=2)
    created_date = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)

    course = relationship("Course", back_populates="mentors")
    students = relationship("Student", back_populates="mentor")
    task_checkers = relationship("TaskChecker", back_populates="mentor", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_mentor_course', 'course_id'),
    )


class Student(Base):
    """
    Course participant.

    total_score, rank and total_score_change_date are owned by the nightly
    score job; mentor_id and the expulsion flags are set by admin actions.
    """
    __tablename__ = 'student'

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey('course.id', ondelete='CASCADE'), nullable=False)
    mentor_id = Column(Integer, ForeignKey('mentor.id', ondelete='SET NULL'), nullable=True)
    name = Column(Text, nullable=False, default='')

    total_score = Column(Float, nullable=False, default=0)
    rank = Column(Integer, nullable=False, default=999999)
    total_score_change_date = Column(TIMESTAMP(timezone=True))

    is_expelled = Column(Boolean, nullable=False, default=False)
    is_failed = Column(Boolean, nullable=False, default=False)

    course = relationship("Course", back_populates="students")
    mentor = relationship("Mentor", back_populates="students")
    task_results = relationship("TaskResult", back_populates="student", cascade="all, delete-orphan")
    task_interview_results = relationship("TaskInterviewResult", back_populates="student", cascade="all, delete-orphan")
    task_checkers = relationship("TaskChecker", back_populates="student", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_student_course', 'course_id'),
        Index('idx_student_total_score', 'total_score'),
    )


class TaskResult(Base):
    __tablename__ = 'task_result'

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    course_task_id = Column(Integer, ForeignKey('course_task.id', ondelete='CASCADE'), nullable=False)
    score = Column(Float, nullable=False, default=0)

    student = relationship("Student", back_populates="task_results")
    course_task = relationship("CourseTask", back_populates="task_results")

    __table_args__ = (
        UniqueConstraint('student_id', 'course_task_id', name='uq_task_result_student_task'),
    )


class TaskInterviewResult(Base):
    """Interview outcome; counted into the total score like a task result."""
    __tablename__ = 'task_interview_result'

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    course_task_id = Column(Integer, ForeignKey('course_task.id', ondelete='CASCADE'), nullable=False)
    score = Column(Float, nullable=True)

    student = relationship("Student", back_populates="task_interview_results")

    __table_args__ = (
        UniqueConstraint('student_id', 'course_task_id', name='uq_task_interview_result_student_task'),
    )


class TaskChecker(Base):
    """Who reviews a given student's submission for a course task."""
    __tablename__ = 'task_checker'

    id = Column(Integer, primary_key=True)
    mentor_id = Column(Integer, ForeignKey('mentor.id', ondelete='CASCADE'), nullable=False)
    student_id = Column(Integer, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    course_task_id = Column(Integer, ForeignKey('course_task.id', ondelete='CASCADE'), nullable=False)

    mentor = relationship("Mentor", back_populates="task_checkers")
    student = relationship("Student", back_populates="task_checkers")
    course_task = relationship("CourseTask", back_populates="task_checkers")

    __table_args__ = (
        UniqueConstraint('student_id', 'course_task_id', name='uq_task_checker_student_task'),
        Index('idx_task_checker_mentor', 'mentor_id'),
    )
