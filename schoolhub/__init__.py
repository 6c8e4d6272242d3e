"""SchoolHub Python client package.

Keep package import lightweight; import heavy submodules explicitly where needed.
"""

__version__ = "1.0.0"
__all__ = [
	"aggregators",
	"calculators",
	"client",
	"config",
	"coordinator",
	"exceptions",
	"export",
	"formatters",
	"mappers",
	"models",
	"query",
	"query_keys",
	"validation",
]
