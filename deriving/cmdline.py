"""
This generates code from algebraic type declarations.

{0}

For example:

    deriving mypackage.types:DECLARATIONS -d json

prints a Python module with a JSON encoder and decoder
for each declaration in mypackage.types.DECLARATIONS.

    deriving -h

will explain all the arguments.
"""
import sys, argparse
from importlib import import_module
from pathlib import Path

DEFAULT_DERIVATION = "json"

parser = argparse.ArgumentParser(
	prog="deriving",
	description="Generate encoders, decoders, and such from type declarations.",
)
parser.add_argument("declarations", help="MODULE:ATTRIBUTE naming a list of type declarations.")
parser.add_argument('-d', "--derive", action="append", metavar="NAME", help="Apply this derivation. Say it again for more. The default is %s." % DEFAULT_DERIVATION)
parser.add_argument('-c', "--check", action="store_true", help="Check that the declarations are derivable, but generate nothing.")
parser.add_argument('-g', "--group", action="store_true", help="Split the declarations into groups which refer to each other, and derive each group separately.")
parser.add_argument('-v', "--verbose", action="count", help="Say what is going on.")
parser.add_argument('-o', "--output", type=Path, help="Write the generated module here rather than to standard output.")

class Yuck(Exception):
	pass

def load_declarations(where:str, report) -> list:
	module_name, _, attribute = where.partition(":")
	if not (module_name and attribute):
		report.bad_declarations(where, "Say MODULE:ATTRIBUTE, as in mypackage.types:DECLARATIONS")
		raise Yuck(where)
	try: module = import_module(module_name)
	except ImportError as ex:
		report.bad_declarations(where, str(ex))
		raise Yuck(where)
	try: return list(getattr(module, attribute))
	except AttributeError:
		report.bad_declarations(where, "Module %s has no %s" % (module_name, attribute))
		raise Yuck(where)

def run(args):
	from .diagnostics import Report, TooManyIssues
	from .combinators import lookup
	from .reflector import UnsupportedShape, reflect_batch
	from .grouping import declaration_groups
	from .engines import Diagnostic
	from . import emit
	# The adapters register their derivations on import.
	from .adapters import json_codec, defaults

	report = Report(verbose=args.verbose)
	try:
		try: definitions = load_declarations(args.declarations, report)
		except Yuck: pass
		try: derivations = [lookup(name) for name in args.derive or [DEFAULT_DERIVATION]]
		except KeyError as ex: report.unknown_derivation(ex.args[0])
		if report.sick():
			report.complain_to_console()
			return 1
		batches = declaration_groups(definitions) if args.group else [definitions]
		report.info("%d declaration(s) in %d batch(es)" % (len(definitions), len(batches)))
		if args.check:
			for batch in batches:
				try: reflect_batch(batch)
				except UnsupportedShape as ex: report.error([ex.phrase] if ex.phrase else [], str(ex))
		else:
			outputs = []
			for derivation in derivations:
				for batch in batches:
					for item in derivation.generate(batch, report):
						if isinstance(item, Diagnostic): report.derivation_failed(derivation.name, item)
						outputs.append(item)
		if report.sick():
			report.complain_to_console()
			return 1
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if args.check:
		print("Looks derivable to me.", file=sys.stderr)
		return 0
	preludes = [m for d in derivations for m in d.prelude]
	text = emit.render(outputs, preludes) + "\n"
	if args.output is None: sys.stdout.write(text)
	else:
		args.output.write_text(text, encoding="utf-8")
		report.info("Wrote", args.output)
	return 0

def main():
	sys.path.insert(0, str(Path.cwd()))
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
