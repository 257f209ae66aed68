SEQUENCE_STATE = "get_instance_seq"
GROUP_SEQUENCE_STATE = "get_group_seq_{group_id}"

STATE_NETWORK_CONFIGURED = "state_network_configured"
STATE_COMPLETED_ESTABLISH_CONNECTIONS = "state_completed_establish_connections"
STATE_COMPLETED = "state_completed"

PUBLISH_AND_COLLECT_TOPIC = "publish_and_collect"
RUN_EVENTS_TOPIC = "run_events"
