"""User-facing strings and error codes shared by the API and the client."""

# ---------------------------------------------------------------------------
# Error codes, sent as ``code`` in every error body.
# ---------------------------------------------------------------------------

CODE_UNAUTHORIZED = "UNAUTHORIZED"
CODE_BAD_REQUEST = "BAD_REQUEST"
CODE_NOT_FOUND = "NOT_FOUND"
CODE_UPSTREAM_ERROR = "UPSTREAM_ERROR"
CODE_INTERNAL_ERROR = "INTERNAL_ERROR"

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

MSG_NO_TOKEN = "Unauthorized: No valid token provided"
MSG_INVALID_TOKEN = "Invalid token"
MSG_MESSAGE_REQUIRED = "Message is required"
MSG_COMMENT_REQUIRED = "Comment text is required"
MSG_COMMENT_TOO_LONG = "Comment must be at most {max_length} characters"
MSG_COMMENT_NOT_FOUND = "Comment not found"
MSG_COMPLETION_FAILED = "Failed to get a response from the assistant"
MSG_INTERNAL_ERROR = "Internal server error"
MSG_INVALID_REQUEST = "Invalid request body"
MSG_HISTORY_CLEARED = "Chat history cleared successfully"

# ---------------------------------------------------------------------------
# Operation names, used as metric labels and in error logs.
# ---------------------------------------------------------------------------

OP_SEND_MESSAGE = "send_message"
OP_FETCH_HISTORY = "fetch_history"
OP_CLEAR_HISTORY = "clear_history"
OP_LIST_COMMENTS = "list_comments"
OP_ADD_COMMENT = "add_comment"
OP_TOGGLE_LIKE = "toggle_like"
