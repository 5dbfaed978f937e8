"""Constants shared by the indexing and retrieval components."""

# HTTP methods an OpenAPI path item may define, in document order
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Request/response content types by preference
PREFERRED_CONTENT_TYPES = (
    "application/json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)

# Success responses inspected for a response schema, in order
SUCCESS_RESPONSE_CODES = ("200", "201", "204", "default")

# Parameter locations turned into object schemas
PARAMETER_LOCATIONS = ("query", "path", "header", "cookie", "body")

# Separator for operation paths and namespaced scopes
PATH_SEPARATOR = "|"

# Scope used when an operation is secured but no OAuth2 scheme applies
DEFAULT_SCOPE = "_default"

# Characters chopped per step when an entry exceeds its token budget
TRUNCATION_STEP = 100

# Upper bound on characters per token, used to pre-trim long texts before counting
MAX_CHARS_PER_TOKEN = 8

# Keywords that carry nested structure; removed by shallow schemas
STRUCTURAL_KEYWORDS = (
    "properties",
    "items",
    "additionalProperties",
    "patternProperties",
    "definitions",
    "$defs",
    "dependencies",
    "allOf",
    "anyOf",
    "oneOf",
    "not",
    "if",
    "then",
    "else",
)

# Keywords shallow schemas always keep
SHALLOW_HINT_KEYWORDS = ("type", "title", "format")

# Upper bound of candidates the shortlisting model may return
MAX_SHORTLIST = 5

# Letters used to label candidates in prompts
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# LLM prompts
OBJECTIVE_SUMMARY_PROMPT = """My client told me to do this:
```{objective}```
Help me summarize the task in a paragraph so that I can create a line item in the invoice.
Rules:
1. It should be generic enough so that similar tasks can be combined.
2. It should not have any data specific to the task. Replace the data with their description."""

SHORTLIST_PROMPT = """{objective_prefix}
Your task is to shortlist APIs that can be used to accomplish the objective.
Here is a list of possible choices for the API call (in randomized order):
{choices}
Your task is to shortlist at most {limit} APIs in descending order of fittingness.
Rules:
1. The most probable API should be at the top of the list.
2. You must choose at least one API.
3. Provide reasoning for each choice and how it will help with the objective."""

PROPERTY_SHORTLIST_PROMPT = """{objective_prefix}
I want to call the external resource {operation}.
And I came up with this input to the resource:
```{filtered_schema}```
Your task is to shortlist properties that may be relevant to achieve the objective.
You must choose from the following JSONSchema:
```{chunk_schema}```"""
