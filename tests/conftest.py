# tests/conftest.py
"""
Shared Java sources and helpers for the javatrace test suite.
"""

from types import MappingProxyType

import pytest

from javatrace.frontend import parse_source
from javatrace.locator import locate_method
from javatrace.syntax_tree import NO_LOC
from javatrace.trace import ExecutionStep

# ---------------------------------------------------------------------------
# Snippets (parsed by the wrapping strategies)
# ---------------------------------------------------------------------------

SCENARIO_A = "int x = 5; if (x > 3) { x = 10; } return x;"

SCENARIO_B = "for (int i = 0; i < 10; i = i + 1) { }"

METHOD_ONLY = """\
public int add(int a, int b) {
    int sum = a + b;
    return sum;
}"""

BREAK_SNIPPET = """\
int count = 0;
while (count < 100) {
    count = count + 1;
    if (count == 2) {
        break;
    }
}
return count;"""

CONTINUE_SNIPPET = """\
int sum = 0;
for (int i = 0; i < 4; i = i + 1) {
    if (i == 1) {
        continue;
    }
    sum = sum + i;
}"""

INFINITE_SNIPPET = """\
int n = 0;
while (true) {
    n = n + 1;
}"""

UNKNOWN_CONDITION_SNIPPET = """\
int y = foo();
if (y > 1) {
    y = 2;
} else {
    y = 3;
}"""

NESTED_DECLARATION_SNIPPET = """\
int a = 1;
if (a > 0) {
    int b = a + 1;
}
if (a > 5) {
    int z = 1;
}"""

# ---------------------------------------------------------------------------
# Complete compilation units
# ---------------------------------------------------------------------------

COUNTER_JAVA = """\
public class Counter {
    public static void main(String[] args) {
        int total = 0;
        for (int i = 0; i < 3; i = i + 1) {
            total = total + i;
        }
        System.out.println(total);
    }
}"""

FACTORIAL_JAVA = """\
public class Factorial {
    public static int fact(int n) {
        if (n <= 1) {
            return 1;
        }
        return n * fact(n - 1);
    }
}"""

MUTUAL_JAVA = """\
public class Parity {
    static boolean isEven(int n) {
        if (n == 0) return true;
        if (n < 0) return isOdd(-n - 1);
        return isOdd(n - 1);
    }

    static boolean isOdd(int n) {
        if (n == 0) return false;
        return isEven(n - 1);
    }
}"""

HELPER_CALLS_JAVA = """\
public class Report {
    public static void main(String[] args) {
        int score = 7;
        String label = describe(score);
        System.out.println("score=" + score);
    }

    static String describe(int value) {
        return "value " + value;
    }
}"""

SEALED_JAVA = """\
public sealed class Shape {
    int area(int w, int h) {
        return w * h;
    }
}"""

ANNOTATED_JAVA = """\
@SuppressWarnings(Foo.class)
public class Annotated {
    void run() {
        int y = 2;
    }
}"""

MISMATCHED_JAVA = """\
public class Broken {
    public void run() {
        int x = 1;

}"""

FIELDS_ONLY_JAVA = "class Empty { int x; }"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def locate(source):
    """Parse *source* and return the selected method's descriptor."""
    return locate_method(parse_source(source).unit)


def make_step(index, kind, variables=None, **payload):
    """Build an :class:`ExecutionStep` with a frozen payload and snapshot."""
    return ExecutionStep(
        index=index,
        kind=kind,
        payload=MappingProxyType(payload),
        loc=NO_LOC,
        variables=MappingProxyType(dict(variables or {})),
    )


def call_argument(expression, value):
    return MappingProxyType({"expression": expression, "value": value})


@pytest.fixture
def counter_method():
    return locate(COUNTER_JAVA)


@pytest.fixture
def factorial_method():
    return locate(FACTORIAL_JAVA)
