from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder

SANDBOX_PROGRAM = """
namespace Sandbox;

using Corvus.Expressions.SourceGenerator;

partial class Program
{
    static void Main(string[] args)
    {
        Console.WriteLine(StringLengthBonsai());
    }

    [GenerateBonsai]
    public static Func<string, int> StringLength => static message => message.Length;

    [GenerateBonsai]
    public static Func<string, string> SayHello => static message => "Hello " + message;

    [GenerateBonsai]
    public static DoTheThing SpanLength => static message => message.Length;

    public delegate int DoTheThing(ReadOnlySpan<char> message);
}
"""


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def sandbox_source() -> str:
    return SANDBOX_PROGRAM
