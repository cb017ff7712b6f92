"""File layout shared by the tree serializer and builder."""

# Modern element files: element field -> file name
ELEMENT_FILES = {
    "script": "script.ts",
    "styles": "styles.css",
    "template": "template.html",
}

# Legacy section files: (inline field, URL field, extension)
LEGACY_FILES = (
    ("script", "scriptUrl", "js"),
    ("styles", "stylesUrl", "css"),
    ("template", "templateUrl", "html"),
    ("properties", "propertiesUrl", "json"),
)

# Record-level file listing the definition names in document order
DEFINITIONS_FILE = "definitions.json"
