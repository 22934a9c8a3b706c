"""
Constants used by agent-interest notifications.
"""

# Deep links into the communication hub, per recipient side
TEAM_COMMUNICATION_URL = "/team-explore?tab=communication"
AGENT_COMMUNICATION_URL = "/agent-explore?tab=communication"
VIEW_COMMUNICATION_ACTION = "View Communication"

# Display-name fallbacks when a join yields no name
DEFAULT_AGENT_NAME = "An agent"
DEFAULT_TEAM_NAME = "Team"
DEFAULT_OWN_PLAYER_NAME = "your player"
DEFAULT_PLAYER_NAME = "the player"

# Notification list pagination
DEFAULT_NOTIFICATION_PAGE_SIZE = 50
