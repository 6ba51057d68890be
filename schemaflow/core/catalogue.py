# schemaflow/core/catalogue.py

from schemaflow.core.models import Category, PropertyType

CATEGORY_NAMES = [c.value for c in Category]
PROPERTY_TYPE_NAMES = [t.value for t in PropertyType]

# Structural shape a schema record must have to be registered.
# Property schemas are only required to be objects: their internal
# consistency is checked lazily, at validation time.
SCHEMA_SHAPE = {
    "type": "object",
    "required": ["id", "name", "category", "properties"],
    "properties": {
        "id": {
            "type": "string",
            "minLength": 1
        },
        "name": {
            "type": "string",
            "minLength": 1
        },
        "category": {
            "type": "string",
            "enum": CATEGORY_NAMES
        },
        "properties": {
            "type": "object",
            "additionalProperties": {"type": "object"}
        },
        "required": {
            "type": "array",
            "items": {"type": "string"}
        },

        # Optional descriptive fields
        "description": {"type": "string"},
        "icon": {"type": "string"},
        "color": {"type": "string"},
        "version": {"type": "string"},

        # Presentation only, never validated beyond being a mapping
        "uiSchema": {"type": "object"},
        "dataSource": {"type": "object"}
    },
    "additionalProperties": True
}


BUILTIN_SCHEMAS = [
    {
        "id": "start",
        "name": "Start",
        "description": "Beginning of workflow",
        "category": "start",
        "icon": "▶️",
        "color": "hsl(142, 76%, 36%)",
        "version": "1.0.0",
        "properties": {}
    },
    {
        "id": "end",
        "name": "End",
        "description": "End of workflow",
        "category": "end",
        "icon": "🏁",
        "color": "hsl(0, 84%, 60%)",
        "version": "1.0.0",
        "properties": {}
    },
    {
        "id": "api-data-source",
        "name": "API Data Source",
        "description": "Fetch records from an HTTP endpoint",
        "category": "data",
        "icon": "🌐",
        "color": "hsl(217, 91%, 60%)",
        "version": "1.0.0",
        "properties": {
            "endpoint": {
                "type": "string",
                "title": "Endpoint URL",
                "description": "Absolute http(s) URL",
                "pattern": "https?://\\S+",
                "format": "url"
            },
            "method": {
                "type": "string",
                "title": "HTTP Method",
                "enum": ["GET", "POST", "PUT", "DELETE"],
                "default": "GET"
            },
            "timeoutSeconds": {
                "type": "number",
                "title": "Timeout (seconds)",
                "minimum": 1,
                "maximum": 300,
                "default": 30
            },
            "headers": {
                "type": "object",
                "title": "Headers"
            }
        },
        "required": ["endpoint", "method"],
        "uiSchema": {
            "endpoint": {"ui:placeholder": "https://api.example.com/items"}
        },
        "dataSource": {"type": "api", "method": "GET"}
    },
    {
        "id": "csv-data-source",
        "name": "CSV File",
        "description": "Read rows from a CSV file",
        "category": "data",
        "icon": "📄",
        "color": "hsl(217, 91%, 60%)",
        "version": "1.0.0",
        "properties": {
            "filePath": {
                "type": "string",
                "title": "File Path"
            },
            "delimiter": {
                "type": "string",
                "title": "Delimiter",
                "enum": [",", ";", "\t", "|"],
                "default": ","
            },
            "hasHeader": {
                "type": "boolean",
                "title": "First row is header",
                "default": True
            }
        },
        "required": ["filePath"],
        "dataSource": {"type": "csv"}
    },
    {
        "id": "transform",
        "name": "Transform",
        "description": "Map fields of every record",
        "category": "process",
        "icon": "⚙️",
        "color": "hsl(38, 92%, 50%)",
        "version": "1.0.0",
        "properties": {
            "mappings": {
                "type": "array",
                "title": "Field Mappings",
                "items": {"type": "string", "title": "Mapping", "pattern": "[A-Za-z_][\\w.]*\\s*->\\s*[A-Za-z_]\\w*"},
                "default": []
            },
            "dropUnmapped": {
                "type": "boolean",
                "title": "Drop unmapped fields",
                "default": False
            }
        },
        "required": ["mappings"]
    },
    {
        "id": "aggregate",
        "name": "Aggregate",
        "description": "Group records and compute summaries",
        "category": "process",
        "icon": "∑",
        "color": "hsl(38, 92%, 50%)",
        "version": "1.0.0",
        "properties": {
            "groupBy": {
                "type": "array",
                "title": "Group By",
                "items": {"type": "string", "title": "Field"}
            },
            "operation": {
                "type": "string",
                "title": "Operation",
                "enum": ["count", "sum", "avg", "min", "max"],
                "default": "count"
            }
        },
        "required": ["operation"]
    },
    {
        "id": "llm-prompt",
        "name": "LLM Prompt",
        "description": "Send records to a language model",
        "category": "ai",
        "icon": "🤖",
        "color": "hsl(262, 83%, 58%)",
        "version": "1.1.0",
        "properties": {
            "model": {
                "type": "string",
                "title": "Model",
                "enum": ["gpt-4o", "gpt-4o-mini", "claude-3-5-sonnet"],
                "default": "gpt-4o-mini"
            },
            "prompt": {
                "type": "string",
                "title": "Prompt Template",
                "description": "Use {{field}} placeholders"
            },
            "temperature": {
                "type": "number",
                "title": "Temperature",
                "minimum": 0,
                "maximum": 2,
                "default": 0.2
            },
            "maxTokens": {
                "type": "number",
                "title": "Max Tokens",
                "minimum": 1,
                "maximum": 32000
            }
        },
        "required": ["model", "prompt"],
        "uiSchema": {
            "prompt": {"ui:widget": "textarea"}
        }
    },
    {
        "id": "row-filter",
        "name": "Filter Rows",
        "description": "Keep records matching a condition",
        "category": "filter",
        "icon": "🔍",
        "color": "hsl(173, 58%, 39%)",
        "version": "1.0.0",
        "properties": {
            "field": {
                "type": "string",
                "title": "Field"
            },
            "operator": {
                "type": "string",
                "title": "Operator",
                "enum": ["equals", "not_equals", "contains", "gt", "lt"],
                "default": "equals"
            },
            "value": {
                "type": "string",
                "title": "Value"
            },
            "caseSensitive": {
                "type": "boolean",
                "title": "Case sensitive",
                "default": False
            }
        },
        "required": ["field", "operator", "value"]
    },
    {
        "id": "chart",
        "name": "Chart",
        "description": "Render records as a chart",
        "category": "visualize",
        "icon": "📊",
        "color": "hsl(340, 82%, 52%)",
        "version": "1.0.0",
        "properties": {
            "chartType": {
                "type": "select",
                "title": "Chart Type",
                "enum": ["bar", "line", "pie", "scatter"],
                "default": "bar"
            },
            "title": {
                "type": "string",
                "title": "Title"
            },
            "series": {
                "type": "multiselect",
                "title": "Series"
            }
        },
        "required": ["chartType"]
    },
    {
        "id": "if-condition",
        "name": "If / Else",
        "description": "Route records by a boolean expression",
        "category": "conditional",
        "icon": "🔀",
        "color": "hsl(48, 96%, 53%)",
        "version": "1.0.0",
        "properties": {
            "expression": {
                "type": "string",
                "title": "Expression"
            },
            "stopOnFalse": {
                "type": "boolean",
                "title": "Stop when false",
                "default": False
            }
        },
        "required": ["expression"]
    }
]
