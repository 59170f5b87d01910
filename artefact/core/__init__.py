__version__ = "0.1.0"

from artefact.core.utils.core_utils import *
from artefact.core.base_cli import BaseCLI
from artefact.core.types import FieldType, QueryMethod
from artefact.core.constant import Constant, value
from artefact.core.property import Property, Derivation, InvalidDefaultValue, NO_DEFAULT
from artefact.core.field import FieldBuilder, field
from artefact.core.schema import Schema
from artefact.core.table import Table, TableCompiler, SQLiteTableCompiler, UnsupportedFieldType, compile_ddl
from artefact.core.host import bind, unbind, get_host, HostCapabilityMissing
