from tutorgrid.models.activity_log import ActivityLog  # noqa: F401
from tutorgrid.models.assignment import Assignment, AssignmentStudent, AssignmentTeacher  # noqa: F401
from tutorgrid.models.backup import BackupSnapshot  # noqa: F401
from tutorgrid.models.student import Student  # noqa: F401
from tutorgrid.models.teacher import Teacher  # noqa: F401
from tutorgrid.models.time_slot import TimeSlot  # noqa: F401
