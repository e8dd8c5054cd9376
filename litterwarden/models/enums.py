from enum import Enum
import sqlalchemy as sa
from sqlalchemy import Column


class Priority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


# Ordering weight for pending reports; anything unrecognised ranks below LOW.
PRIORITY_RANK = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


def enum_column(enum_cls: type[Enum], name: str, index: bool = False) -> Column:
    return Column(
        sa.Enum(
            enum_cls,
            values_callable=lambda enum: [item.value for item in enum],
            name=name,
        ),
        nullable=False,
        index=index,
    )
