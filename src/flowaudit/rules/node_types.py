"""Step type identifiers recognised by the default security tables."""

from enum import StrEnum


class NodeType(StrEnum):
    """Known workflow step types."""

    # Core data-shaping and control steps
    AGGREGATE = "n8n-nodes-base.aggregate"
    CONVERT_TO_FILE = "n8n-nodes-base.convertToFile"
    CRON = "n8n-nodes-base.cron"
    DATE_TIME = "n8n-nodes-base.dateTime"
    DATE_TIME_TOOL = "n8n-nodes-base.dateTimeTool"
    ERROR_TRIGGER = "n8n-nodes-base.errorTrigger"
    EXECUTION_DATA = "n8n-nodes-base.executionData"
    EXTRACT_FROM_FILE = "n8n-nodes-base.extractFromFile"
    EXTRACT_PDF = "n8n-nodes-base.readPDF"
    FILTER = "n8n-nodes-base.filter"
    FORM = "n8n-nodes-base.form"
    HTML = "n8n-nodes-base.html"
    ITEM_LISTS = "n8n-nodes-base.itemLists"
    LIMIT = "n8n-nodes-base.limit"
    MANUAL_TRIGGER = "n8n-nodes-base.manualTrigger"
    MARKDOWN = "n8n-nodes-base.markdown"
    MERGE = "n8n-nodes-base.merge"
    MOVE_BINARY_DATA = "n8n-nodes-base.moveBinaryData"
    NO_OP = "n8n-nodes-base.noOp"
    QUICK_CHART = "n8n-nodes-base.quickChart"
    READ_BINARY_FILE = "n8n-nodes-base.readBinaryFile"
    REMOVE_DUPLICATES = "n8n-nodes-base.removeDuplicates"
    RENAME_KEYS = "n8n-nodes-base.renameKeys"
    SCHEDULE_TRIGGER = "n8n-nodes-base.scheduleTrigger"
    SET = "n8n-nodes-base.set"
    SORT = "n8n-nodes-base.sort"
    SPLIT_IN_BATCHES = "n8n-nodes-base.splitInBatches"
    SPLIT_OUT = "n8n-nodes-base.splitOut"
    SPREADSHEET_FILE = "n8n-nodes-base.spreadsheetFile"
    START = "n8n-nodes-base.start"
    STICKY_NOTE = "n8n-nodes-base.stickyNote"
    STOP_AND_ERROR = "n8n-nodes-base.stopAndError"
    SUMMARIZE = "n8n-nodes-base.summarize"
    SWITCH = "n8n-nodes-base.switch"
    WAIT = "n8n-nodes-base.wait"
    XML = "n8n-nodes-base.xml"
    IF = "n8n-nodes-base.if"

    # Code execution and local system access
    CODE = "n8n-nodes-base.code"
    FUNCTION = "n8n-nodes-base.function"
    EXECUTE_COMMAND = "n8n-nodes-base.executeCommand"
    EXECUTE_COMMAND_TOOL = "n8n-nodes-base.executeCommandTool"
    READ_WRITE_FILE = "n8n-nodes-base.readWriteFile"
    EXECUTE_WORKFLOW = "n8n-nodes-base.executeWorkflow"
    EXECUTE_WORKFLOW_TRIGGER = "n8n-nodes-base.executeWorkflowTrigger"

    # External services
    HTTP_REQUEST = "n8n-nodes-base.httpRequest"
    HTTP_REQUEST_TOOL = "n8n-nodes-base.httpRequestTool"
    WEBHOOK = "n8n-nodes-base.webhook"
    RESPOND_TO_WEBHOOK = "n8n-nodes-base.respondToWebhook"
    SLACK = "n8n-nodes-base.slack"
    SLACK_TRIGGER = "n8n-nodes-base.slackTrigger"
    GMAIL = "n8n-nodes-base.gmail"
    GITHUB = "n8n-nodes-base.github"
    GOOGLE_SHEETS = "n8n-nodes-base.googleSheets"
    GOOGLE_SHEETS_TOOL = "n8n-nodes-base.googleSheetsTool"
    GOOGLE_DRIVE = "n8n-nodes-base.googleDrive"
    GOOGLE_DOCS = "n8n-nodes-base.googleDocs"
    GOOGLE_DOCS_TOOL = "n8n-nodes-base.googleDocsTool"
    GOOGLE_BIGQUERY = "n8n-nodes-base.googleBigQuery"
    GOOGLE_CALENDAR = "n8n-nodes-base.googleCalendar"
    GOOGLE_CALENDAR_TOOL = "n8n-nodes-base.googleCalendarTool"
    NOTION = "n8n-nodes-base.notion"
    NOTION_TOOL = "n8n-nodes-base.notionTool"
    JIRA = "n8n-nodes-base.jira"
    JIRA_TOOL = "n8n-nodes-base.jiraTool"
    LINEAR_TOOL = "n8n-nodes-base.linearTool"
    REDIS = "n8n-nodes-base.redis"
    SUPABASE = "n8n-nodes-base.supabase"
    N8N = "n8n-nodes-base.n8n"

    # AI / LangChain steps
    LANGCHAIN_AGENT = "@n8n/n8n-nodes-langchain.agent"
    LANGCHAIN_OPENAI = "@n8n/n8n-nodes-langchain.lmChatOpenAi"
    LANGCHAIN_OPENAI_OLD = "@n8n/n8n-nodes-langchain.openAi"
    LANGCHAIN_ANTHROPIC = "@n8n/n8n-nodes-langchain.lmChatAnthropic"
    LANGCHAIN_GEMINI = "@n8n/n8n-nodes-langchain.lmChatGoogleGemini"
    LANGCHAIN_HTTP_TOOL = "@n8n/n8n-nodes-langchain.toolHttpRequest"
    LANGCHAIN_CODE = "@n8n/n8n-nodes-langchain.code"
    LANGCHAIN_SERP_API = "@n8n/n8n-nodes-langchain.toolSerpApi"
    LANGCHAIN_QDRANT = "@n8n/n8n-nodes-langchain.vectorStoreQdrant"
    LANGCHAIN_PINECONE = "@n8n/n8n-nodes-langchain.vectorStorePinecone"
    LANGCHAIN_EMBEDDINGS_OPENAI = "@n8n/n8n-nodes-langchain.embeddingsOpenAi"
    LANGCHAIN_MEMORY_BUFFER_WINDOW = "@n8n/n8n-nodes-langchain.memoryBufferWindow"
