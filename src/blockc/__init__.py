"""blockc - compile visual block programs to C++ and Python source."""

from .blocks import BlockInstance, ExpressionValue, LiteralValue
from .catalog import BlockCatalog, default_catalog
from .codegen import GeneratedCode, generate_code
from .frontend import Validator, ValidationError, has_validation_errors, validate_blocks
from .serialize import Program, dump_program, load_program
from .tree import BlockTree, BlockTreeError
