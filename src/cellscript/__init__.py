"""Cell-level transpiler for reactive notebooks."""

# Cells
from cellscript.cells import CELL_MODES as CELL_MODES
from cellscript.cells import DEFAULT_TAGS as DEFAULT_TAGS
from cellscript.cells import RAW_MODES as RAW_MODES
from cellscript.cells import Cell as Cell
from cellscript.cells import CellMode as CellMode

# Edit buffer
from cellscript.edits import Edit as Edit
from cellscript.edits import EditBuffer as EditBuffer

# Errors
from cellscript.errors import AssignmentError as AssignmentError
from cellscript.errors import ParseError as ParseError
from cellscript.errors import StructuralError as StructuralError
from cellscript.errors import TranspileError as TranspileError

# Ids
from cellscript.ids import IdCounter as IdCounter

# Static analysis
from cellscript.assignments import check_assignments as check_assignments
from cellscript.awaits import find_awaits as find_awaits
from cellscript.parser import JavaScriptCell as JavaScriptCell
from cellscript.parser import parse_javascript as parse_javascript
from cellscript.references import find_references as find_references

# Templates
from cellscript.template import TemplateElement as TemplateElement
from cellscript.template import TemplateHole as TemplateHole
from cellscript.template import TemplateLiteral as TemplateLiteral
from cellscript.template import TemplateParser as TemplateParser
from cellscript.template import parse_template as parse_template
from cellscript.template import transpile_template as transpile_template

# Transpiler
from cellscript.transpile import TranspiledJavaScript as TranspiledJavaScript
from cellscript.transpile import TranspileOptions as TranspileOptions
from cellscript.transpile import transpile as transpile
from cellscript.transpile import transpile_cell as transpile_cell
from cellscript.transpile import transpile_javascript as transpile_javascript
