"""Centralized message constants for error messages and log templates."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Configuration Errors
    INVALID_MANAGER_OPTIONS = "Invalid manager options: {errors}"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    NODE_PASSWORD_REQUIRED = "NODE__PASSWORD environment variable is required"
    NODE_PASSWORD_MISSING = "Node options must include a password"

    # Node Errors
    NODE_CONNECT_FAILED = "Could not connect to node {identifier} after {attempts} attempts"
    NODE_DESTROYED = "Node {identifier} has been destroyed"
    NODE_WRITE_FAILED = "Could not write to node {identifier}, frame queued for reconnect"

    # Protocol Errors
    MALFORMED_FRAME = "Malformed frame from node"
    MALFORMED_SEARCH_RESPONSE = "Search response is not shaped like {identifier, results}"
    MALFORMED_PLAYLIST = "Playlist response contains invalid metadata or tracks"
    NON_JSON_RESPONSE = "Node returned a body that is not JSON"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Manager Lifecycle
    MANAGER_CREATED = "Manager created for node %s at %s:%s"
    MANAGER_INITIALIZED = "Manager initialized with client id %s"
    MANAGER_ALREADY_INITIALIZED = "Manager already initialized, ignoring init()"

    # Node Connection
    NODE_CONNECTING = "[NODE-%s] Connecting to %s (attempt %s/%s)"
    NODE_CONNECTED = "[NODE-%s] Connected, listening for frames"
    NODE_CONNECT_FAILED = "[NODE-%s] Connect attempt %s failed: %r, retrying in %.2fs"
    NODE_CONNECT_GAVE_UP = "[NODE-%s] Giving up after %s attempts"
    NODE_STATE_CHANGED = "[NODE-%s] State %s -> %s"
    NODE_SOCKET_CLOSED = "[NODE-%s] Socket closed (code=%s)"
    NODE_SOCKET_ERROR = "[NODE-%s] Socket error"
    NODE_RECONNECTING = "[NODE-%s] Reconnecting"
    NODE_DESTROYED = "[NODE-%s] Destroyed"
    NODE_ACCESS_TOKEN = "[NODE-%s] Received access token"
    NODE_FRAME_QUEUED = "[NODE-%s] Socket not open, queued frame (%s pending)"
    NODE_QUEUE_FLUSHED = "[NODE-%s] Flushed %s queued frames"
    NODE_QUEUE_FULL = "[NODE-%s] Send queue full, dropping %s frames"
    NODE_FRAME_DROPPED = "[NODE-%s] Dropping frame while %s"
    NODE_WRITE_FAILED = "[NODE-%s] Write failed, requeued %s frames: %r"
    NODE_UNEXPECTED_MESSAGE = "[NODE-%s] Unexpected socket message %s"

    # Frames
    FRAME_MALFORMED = "Dropping malformed frame: %r"
    FRAME_DISPATCH_FAILED = "Error dispatching %s frame"
    FRAME_RECEIVED = "Received %s frame"
    FRAME_NO_SESSION = "No session for guild %s, dropping %s"

    # Requests
    REQUEST_SENT = "%s /%s -> %s"
    REQUEST_FAILED = "%s /%s failed: %r"

    # Gateway
    GATEWAY_FORWARDED = "Forwarded %s to node"
    GATEWAY_FORWARD_FAILED = "Could not forward %s: %s"

    # Search
    SEARCH_RESOLVED = "Search '%s' (%s) resolved to %s with %s tracks"

    # Sessions
    SESSION_CREATED = "Created session for guild %s"
    SESSION_REMOVED = "Removed session for guild %s"
    SESSION_CONNECTING = "Joining voice channel %s in guild %s"
    SESSION_DISCONNECTING = "Leaving voice in guild %s"

    # Event Bus
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"

    # Bot Lifecycle
    LOGGING_CONFIG_FALLBACK = "Could not load logging config %s (%s), using basic console logging"
    BOT_STARTING = "Starting node manager bot in {environment} mode"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_READY = "Bot ready as %s (%s)"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_RAW_EVENT_UNPARSEABLE = "Ignoring unparseable gateway payload"
    BOT_NO_WEBSOCKET = "No gateway websocket for guild %s"
