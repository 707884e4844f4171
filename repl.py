import argparse
import logging

from bytecalc.compiler import compile_expression, disassemble
from bytecalc.parser import parse, unparse
from bytecalc.pipeline import evaluate_line
from bytecalc.runtime import VirtualMachine
from bytecalc.tokenizer import tokenize
from bytecalc.utils import CalculatorError


def evaluate_debug(code: str) -> str:
    try:
        tokens = tokenize(code)
        print(f"tokens: {' '.join(str(t) for t in tokens)}")
        expression = parse(tokens)
        print(f"ast: {unparse(expression)}")
        instructions = compile_expression(expression)
        print(f"bytecode:\n{disassemble(instructions)}")
        vm = VirtualMachine()
        history = vm.run(instructions)
        print(f"history: {', '.join(str(v) for v in history)}")
        return str(vm.result())
    except CalculatorError as e:
        return f"Error: {e}"


def main() -> None:
    arg_parser = argparse.ArgumentParser(description="Arithmetic expression calculator")
    arg_parser.add_argument("--debug", action="store_true", help="Show tokens, AST and bytecode for each line")
    arg_parser.add_argument(
        "--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
    )
    arg_parser.add_argument("--prompt", default="> ", help="Input prompt")
    args = arg_parser.parse_args()

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    while True:
        try:
            line = input(args.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        code = line.strip()
        if not code:
            continue

        print(evaluate_debug(code) if args.debug else evaluate_line(code))


if __name__ == "__main__":
    main()
