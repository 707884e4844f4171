import logging

from bytecalc.compiler import compile_expression
from bytecalc.parser import parse
from bytecalc.runtime import VirtualMachine
from bytecalc.tokenizer import tokenize
from bytecalc.utils import CalculatorError
from bytecalc.value import Value

logger = logging.getLogger(__name__)


def evaluate(code: str) -> Value:
    tokens = tokenize(code)
    expression = parse(tokens)
    instructions = compile_expression(expression)
    vm = VirtualMachine()
    vm.run(instructions)
    return vm.result()


def evaluate_line(line: str) -> str:
    """Evaluates one input line; failures of any stage come back as "Error: ..." text"""
    try:
        return str(evaluate(line.strip()))
    except CalculatorError as e:
        logger.info("Evaluation of %r failed: %r", line, e)
        return f"Error: {e}"
