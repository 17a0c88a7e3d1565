from enum import Enum


class Role(str, Enum):
    STUDENT = "STUDENT"
    MENTOR = "MENTOR"
    SENIOR_MENTOR = "SENIOR_MENTOR"
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"


class GroupCategory(str, Enum):
    CS_BSC_MENG = "CS_BSC_MENG"
    ROBOTICS_AI_MENG = "ROBOTICS_AI_MENG"
    CS_MATHS_MENG = "CS_MATHS_MENG"


class AttendanceStatus(str, Enum):
    REGISTERED = "REGISTERED"
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    CANCELLED = "CANCELLED"

    @classmethod
    def _missing_(cls, value):
        # ATTENDED - старое название PRESENT
        if isinstance(value, str) and value.upper() == "ATTENDED":
            return cls.PRESENT
        return None
