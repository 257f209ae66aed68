from enum import Enum


class TopicStatus(Enum):
    OPEN = 'OPEN'
    DRAINING = 'DRAINING'
    CLOSED = 'CLOSED'
