#!/usr/bin/env python3

import click
import pytest
from click.testing import CliRunner

from model_schema_to_code.cli_utils import PROGRAM_NAME, reconstruct_command_line
from model_schema_to_code.model_schema_to_code import model_schema_to_code


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        result = reconstruct_command_line(model_schema_to_code)
        assert result == "model_schema_to_code"

    def test_reconstruct_command_line_inside_a_command(self, tmp_path):
        """Test command reconstruction from a live Click context"""
        source = tmp_path / "models.json"
        source.write_text("[]")

        @click.command()
        @click.option("--disable", multiple=True)
        @click.option("--verbose", "-v", is_flag=True, default=False)
        @click.argument("declarations", type=click.Path(exists=True))
        def command(disable, verbose, declarations):
            click.echo(reconstruct_command_line(command))

        result = CliRunner().invoke(command, [str(source), "--disable", "naming", "--disable", "json_schema", "-v"])
        assert result.exit_code == 0
        assert result.output.strip() == f"{PROGRAM_NAME} models.json --disable naming --disable json_schema --verbose"


if __name__ == "__main__":
    pytest.main([__file__])
