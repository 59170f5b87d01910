import importlib
import json
import logging
import sys
import traceback

from sqlalchemy import Table as SQLTable

from artefact.core import __version__ as VERSION, BaseCLI, Schema, Table, UnsupportedFieldType, compile_ddl, \
    format_exception, get_build_target, BUILD_TARGET_SQLITE, BUILD_TARGET_SQLITE_DEV
from artefact.core import constant
from artefact.core.utils import eprint

FORMATS = ("text", "json", "ddl")


class ArtefactSchemaCLIException (Exception):
    """Base exception class for ArtefactSchemaCLI.
    """
    def __init__(self, message):
        """Initializes the exception.
        """
        super(ArtefactSchemaCLIException, self).__init__(message)


class UsageException (ArtefactSchemaCLIException):
    """Usage exception.
    """
    def __init__(self, message):
        """Initializes the exception.
        """
        super(UsageException, self).__init__(message)


def load_target(target):
    """Resolve a ``<module>:<attribute>`` reference. The attribute may be a dotted path."""
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise UsageException("Invalid target '%s': expected <module>:<attribute>" % target)
    obj = importlib.import_module(module_name)
    for part in attribute.split("."):
        obj = getattr(obj, part)
    return obj


class ArtefactSchemaCLI (BaseCLI):
    """Renders a schema as text or JSON, or compiles it to SQLite DDL.
    """
    def __init__(self, description, epilog):
        super(ArtefactSchemaCLI, self).__init__(description, epilog, VERSION)

        self.parser.add_argument("target", metavar="<module:attribute>",
                                 help="Schema to load, e.g. 'artefact.schemas.commit:commit_schema'. "
                                      "The attribute may also be a schema builder function or a compiled table.")
        self.parser.add_argument("--format", choices=FORMATS, default="text",
                                 help="Output format (default: text).")
        self.parser.add_argument("--table-name", metavar="<name>",
                                 help="Table name used for the 'ddl' format. Defaults to the schema name.")
        self.parser.add_argument("--build-target", metavar="<target>",
                                 choices=(BUILD_TARGET_SQLITE, BUILD_TARGET_SQLITE_DEV),
                                 help="Build target used for constant default values while loading the schema.")

    @staticmethod
    def as_schema(obj, name):
        if isinstance(obj, Schema):
            return obj
        if callable(obj) and not isinstance(obj, SQLTable):
            return Schema(name, obj)
        raise UsageException("'%s' is not a schema" % name)

    def render(self, args):
        # constants are evaluated when the schema module is imported
        constant.value.build_target = args.build_target or get_build_target(args.config_file)
        obj = load_target(args.target)
        name = args.target.partition(":")[2].split(".")[-1]

        if args.format == "ddl":
            if isinstance(obj, SQLTable):
                return compile_ddl(obj)
            schema = self.as_schema(obj, name)
            return compile_ddl(Table(args.table_name or schema.name, schema))

        schema = self.as_schema(obj, name)
        if args.format == "json":
            return json.dumps(schema.to_dict(), indent=2)
        return str(schema)

    def main(self, argv=None):
        """Main routine of the CLI.
        """
        args = self.parse_cli(argv)
        try:
            print(self.render(args))
            return 0
        except UsageException as e:
            eprint("{prog}: {msg}".format(prog=self.parser.prog, msg=e))
        except (ImportError, AttributeError) as e:
            logging.debug(format_exception(e))
            eprint("{prog}: Unable to load '{target}': {msg}".format(prog=self.parser.prog,
                                                                      target=args.target,
                                                                      msg=e))
        except UnsupportedFieldType as e:
            logging.debug(format_exception(e))
            eprint("{prog}: {msg}".format(prog=self.parser.prog, msg=e))
        except Exception:
            eprint('Unexpected error occurred')
            traceback.print_exc()
        return 1


def main():
    DESC = "Artefact Schema Command-Line Interface"
    INFO = "Renders a schema as text or JSON, or compiles it to a SQLite CREATE TABLE statement."
    return ArtefactSchemaCLI(DESC, INFO).main()


if __name__ == '__main__':
    sys.exit(main())
