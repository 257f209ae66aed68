from .topic_consumer import TopicConsumer as TopicConsumer
from .topic_provider import TopicProvider as TopicProvider
from .topic_status import TopicStatus as TopicStatus
