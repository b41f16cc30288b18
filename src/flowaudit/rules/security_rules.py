"""Static security tables: the safe allow-list and the review-required table.

Each review entry's ``type_matcher`` is tried first as an exact type string
and then as a regular expression (search semantics), in declaration order.
An entry that is not a valid regular expression only matches literally.
"""

from pydantic import BaseModel, ConfigDict, Field

from flowaudit.rules.node_types import NodeType

# Rule module ids referenced by the review table
JSCODE_RULE_ID = "jscode"
HTTPREQUEST_RULE_ID = "httprequest"
GOOGLE_SHEETS_RULE_ID = "google-sheets"
BIGQUERY_RULE_ID = "bigquery"
SLACK_RULE_ID = "slack"
IF_RULE_ID = "if"
GOOGLE_DRIVE_RULE_ID = "google-drive"


class ReviewRequiredInfo(BaseModel):
    """Routing metadata for a step type that needs security review."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type_matcher: str
    has_rule_module: bool
    rule_module_id: str | None = None
    external_connection: bool = False


class SecurityConfig(BaseModel):
    """Classification tables. Declaration order of ``review_required_nodes`` matters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    safe_nodes: tuple[str, ...] = ()
    review_required_nodes: tuple[ReviewRequiredInfo, ...] = Field(default_factory=tuple)


def _review(
    node_type: str,
    external: bool,
    rule_module_id: str | None = None,
) -> ReviewRequiredInfo:
    return ReviewRequiredInfo(
        type_matcher=node_type,
        has_rule_module=rule_module_id is not None,
        rule_module_id=rule_module_id,
        external_connection=external,
    )


DEFAULT_SECURITY_CONFIG = SecurityConfig(
    safe_nodes=(
        NodeType.AGGREGATE,
        NodeType.CONVERT_TO_FILE,
        NodeType.CRON,
        NodeType.DATE_TIME,
        NodeType.DATE_TIME_TOOL,
        NodeType.ERROR_TRIGGER,
        NodeType.EXECUTION_DATA,
        NodeType.EXTRACT_FROM_FILE,
        NodeType.EXTRACT_PDF,
        NodeType.FILTER,
        NodeType.FORM,
        NodeType.HTML,
        NodeType.ITEM_LISTS,
        NodeType.LIMIT,
        NodeType.MANUAL_TRIGGER,
        NodeType.MARKDOWN,
        NodeType.MERGE,
        NodeType.MOVE_BINARY_DATA,
        NodeType.NO_OP,
        NodeType.QUICK_CHART,
        NodeType.REMOVE_DUPLICATES,
        NodeType.RENAME_KEYS,
        NodeType.SCHEDULE_TRIGGER,
        NodeType.SET,
        NodeType.SORT,
        NodeType.SPLIT_IN_BATCHES,
        NodeType.SPLIT_OUT,
        NodeType.SPREADSHEET_FILE,
        NodeType.START,
        NodeType.STOP_AND_ERROR,
        NodeType.STICKY_NOTE,
        NodeType.SUMMARIZE,
        NodeType.SWITCH,
        NodeType.WAIT,
        NodeType.XML,
        NodeType.READ_BINARY_FILE,
        NodeType.LANGCHAIN_MEMORY_BUFFER_WINDOW,
    ),
    review_required_nodes=(
        _review(NodeType.CODE, external=False, rule_module_id=JSCODE_RULE_ID),
        _review(NodeType.HTTP_REQUEST, external=True, rule_module_id=HTTPREQUEST_RULE_ID),
        _review(NodeType.GOOGLE_SHEETS, external=True, rule_module_id=GOOGLE_SHEETS_RULE_ID),
        _review(NodeType.GOOGLE_BIGQUERY, external=True, rule_module_id=BIGQUERY_RULE_ID),
        _review(NodeType.SLACK, external=True, rule_module_id=SLACK_RULE_ID),
        _review(NodeType.IF, external=False, rule_module_id=IF_RULE_ID),
        _review(NodeType.SLACK_TRIGGER, external=True),
        _review(NodeType.WEBHOOK, external=True),
        _review(NodeType.RESPOND_TO_WEBHOOK, external=True),
        _review(NodeType.GOOGLE_DRIVE, external=True, rule_module_id=GOOGLE_DRIVE_RULE_ID),
        _review(NodeType.GOOGLE_DOCS, external=True),
        _review(NodeType.GMAIL, external=True),
        _review(NodeType.GITHUB, external=True),
        _review(NodeType.FUNCTION, external=False),
        _review(NodeType.EXECUTE_COMMAND, external=False),
        _review(NodeType.READ_WRITE_FILE, external=False),
        _review(NodeType.REDIS, external=True),
        _review(NodeType.LANGCHAIN_AGENT, external=True),
        _review(NodeType.LANGCHAIN_OPENAI, external=True),
        _review(NodeType.LANGCHAIN_OPENAI_OLD, external=True),
        _review(NodeType.LANGCHAIN_ANTHROPIC, external=True),
        _review(NodeType.LANGCHAIN_GEMINI, external=True),
        _review(NodeType.LANGCHAIN_HTTP_TOOL, external=True),
        _review(NodeType.LANGCHAIN_CODE, external=False),
        _review(NodeType.NOTION, external=True),
        _review(NodeType.NOTION_TOOL, external=True),
        _review(NodeType.JIRA, external=True),
        _review(NodeType.JIRA_TOOL, external=True),
        _review(NodeType.LINEAR_TOOL, external=True),
        _review(NodeType.GOOGLE_CALENDAR, external=True),
        _review(NodeType.GOOGLE_CALENDAR_TOOL, external=True),
        _review(NodeType.GOOGLE_SHEETS_TOOL, external=True, rule_module_id=GOOGLE_SHEETS_RULE_ID),
        _review(NodeType.GOOGLE_DOCS_TOOL, external=True),
        _review(NodeType.HTTP_REQUEST_TOOL, external=True, rule_module_id=HTTPREQUEST_RULE_ID),
        _review(NodeType.EXECUTE_WORKFLOW, external=False),
        _review(NodeType.EXECUTE_WORKFLOW_TRIGGER, external=False),
        _review(NodeType.EXECUTE_COMMAND_TOOL, external=False),
        _review(NodeType.LANGCHAIN_SERP_API, external=True),
        _review(NodeType.LANGCHAIN_QDRANT, external=True),
        _review(NodeType.SUPABASE, external=True),
        _review(NodeType.LANGCHAIN_PINECONE, external=True),
        _review(NodeType.LANGCHAIN_EMBEDDINGS_OPENAI, external=True),
        _review(NodeType.N8N, external=True),
    ),
)
