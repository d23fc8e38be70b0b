"""Tests for the command-line interface."""

import io
import json
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

import requests
from graphql import parse
from rich.console import Console

from arnold import __version__, cli
from arnold.client import ExecResult
from arnold.config import ArnoldConfig
from arnold.introspect import (
    IntrospectionError,
    OperationDescriptor,
    TypeDescription,
    TypeNotFoundError,
)

CONFIG = ArnoldConfig(
    shop_api="http://localhost:3000/shop-api",
    admin_api="http://localhost:3000/admin-api",
)


class CliTestCase(unittest.TestCase):
    """Route CLI output into buffers and pin the config."""

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        patches = [
            patch.object(cli, "console", Console(file=self.out, width=200, color_system=None)),
            patch.object(
                cli, "error_console", Console(file=self.err, width=200, color_system=None)
            ),
            patch("arnold.cli.load_config", return_value=CONFIG),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def run_cli(self, *argv):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            code = cli.main(list(argv))
        return code, stdout.getvalue()


class TestParser(CliTestCase):
    """Test argument handling."""

    def test_version(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            cli.main(["--version"])
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(stdout.getvalue().strip(), __version__)

    def test_no_command_prints_help(self):
        code, stdout = self.run_cli()
        self.assertEqual(code, 1)
        self.assertIn("schema", stdout)
        self.assertIn("auth", stdout)
        self.assertIn("exec", stdout)

    def test_schema_ops_requires_api(self):
        with patch("sys.stderr", new_callable=io.StringIO) as stderr:
            with self.assertRaises(SystemExit):
                cli.main(["schema", "ops"])
        self.assertIn("--api", stderr.getvalue())

    def test_invalid_api(self):
        """Invalid API names are rejected before any request is made."""
        commands = [
            ["schema", "ops", "--api", "invalid"],
            ["schema", "type", "--api", "nope", "SomeType"],
            ["exec", "--api", "bad", "--query", "{ me }"],
            ["auth", "logout", "--api", "bad"],
        ]
        for argv in commands:
            with self.subTest(argv=argv):
                self.err.truncate(0)
                self.err.seek(0)
                code, _ = self.run_cli(*argv)
                self.assertEqual(code, 1)
                self.assertIn('must be "shop" or "admin"', self.err.getvalue())


class TestSchemaCommands(CliTestCase):
    """Test the schema subcommands."""

    @patch("arnold.cli.list_operations")
    def test_ops_text(self, mock_list):
        mock_list.return_value = {
            "queries": [OperationDescriptor("products", None, [], "ProductList!")],
            "mutations": [],
        }

        code, _ = self.run_cli("schema", "ops", "--api", "shop", "--filter", "prod")

        self.assertEqual(code, 0)
        mock_list.assert_called_once_with(CONFIG.shop_api, "prod", api="shop")
        self.assertIn("Queries (1):", self.out.getvalue())
        self.assertIn("products -> ProductList!", self.out.getvalue())

    @patch("arnold.cli.list_operations")
    def test_ops_json(self, mock_list):
        mock_list.return_value = {
            "queries": [],
            "mutations": [OperationDescriptor("logout", None, [], "Success!")],
        }

        code, stdout = self.run_cli("schema", "ops", "--api", "admin", "--json")

        self.assertEqual(code, 0)
        self.assertEqual(
            json.loads(stdout),
            {
                "queries": [],
                "mutations": [
                    {"name": "logout", "description": None, "args": [], "returnType": "Success!"}
                ],
            },
        )

    @patch("arnold.cli.list_operations", side_effect=IntrospectionError("Introspection failed: nope"))
    def test_ops_introspection_error(self, mock_list):
        code, _ = self.run_cli("schema", "ops", "--api", "shop")
        self.assertEqual(code, 1)
        self.assertIn("Introspection failed: nope", self.err.getvalue())

    @patch("arnold.cli.describe_type")
    def test_type_json(self, mock_describe):
        mock_describe.return_value = TypeDescription(
            name="SortOrder", kind="ENUM", enum_values=["ASC", "DESC"]
        )

        code, stdout = self.run_cli("schema", "type", "--api", "shop", "SortOrder", "--json")

        self.assertEqual(code, 0)
        mock_describe.assert_called_once_with(CONFIG.shop_api, "SortOrder", api="shop")
        output = json.loads(stdout)
        self.assertIsNone(output["fields"])
        self.assertEqual(output["enumValues"], ["ASC", "DESC"])

    @patch("arnold.cli.describe_type", side_effect=TypeNotFoundError("Nope"))
    def test_type_not_found(self, mock_describe):
        code, _ = self.run_cli("schema", "type", "--api", "shop", "Nope")
        self.assertEqual(code, 1)
        self.assertIn('Type "Nope" not found', self.err.getvalue())


class TestExecCommand(CliTestCase):
    """Test the exec command."""

    def test_requires_query_or_file(self):
        code, _ = self.run_cli("exec", "--api", "shop")
        self.assertEqual(code, 1)
        self.assertIn("--query", self.err.getvalue())

    def test_invalid_variables(self):
        code, _ = self.run_cli("exec", "--api", "shop", "--query", "{ me }", "--variables", "not-json")
        self.assertEqual(code, 1)
        self.assertIn("Invalid JSON", self.err.getvalue())

    def test_variables_must_be_object(self):
        code, _ = self.run_cli("exec", "--api", "shop", "--query", "{ me }", "--variables", "[1]")
        self.assertEqual(code, 1)
        self.assertIn("Invalid JSON", self.err.getvalue())

    def test_syntax_error(self):
        code, _ = self.run_cli("exec", "--api", "shop", "--query", "{ me ")
        self.assertEqual(code, 1)
        self.assertIn("Invalid GraphQL document", self.err.getvalue())

    @patch("arnold.cli.execute_graphql")
    def test_exec_json(self, mock_execute):
        mock_execute.return_value = ExecResult(data={"product": {"id": "1"}}, status=200)

        code, stdout = self.run_cli(
            "exec",
            "--api",
            "shop",
            "--query",
            "query GetProduct($id: ID!) { product(id: $id) { id } }",
            "--variables",
            '{"id": "1"}',
            "--json",
        )

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(stdout), {"data": {"product": {"id": "1"}}, "status": 200})
        args, kwargs = mock_execute.call_args
        self.assertEqual(args[0], CONFIG.shop_api)
        self.assertEqual(args[2], {"id": "1"})
        self.assertEqual(kwargs["auth"].api, "shop")
        self.assertEqual(kwargs["operation_name"], "GetProduct")

    @patch("arnold.cli.execute_graphql")
    def test_exec_errors_without_data(self, mock_execute):
        mock_execute.return_value = ExecResult(errors=[{"message": "Forbidden"}], status=200)

        code, _ = self.run_cli("exec", "--api", "admin", "--query", "{ me { id } }")

        self.assertEqual(code, 1)
        self.assertIn("Forbidden", self.err.getvalue())

    @patch("arnold.cli.execute_graphql", side_effect=requests.ConnectionError("refused"))
    def test_transport_error(self, mock_execute):
        code, _ = self.run_cli("exec", "--api", "shop", "--query", "{ me { id } }")
        self.assertEqual(code, 1)
        self.assertIn("Request failed", self.err.getvalue())

    def test_get_operation_name(self):
        self.assertEqual(cli.get_operation_name(parse("query A { a } query B { b }")), "A")
        self.assertIsNone(cli.get_operation_name(parse("{ a }")))


class TestAuthCommands(CliTestCase):
    """Test the auth subcommands."""

    @patch("arnold.cli.login", return_value="superadmin")
    def test_login(self, mock_login):
        code, _ = self.run_cli(
            "auth", "login", "--api", "admin", "--email", "superadmin", "--password", "pw"
        )

        self.assertEqual(code, 0)
        mock_login.assert_called_once_with(CONFIG.admin_api, "admin", "superadmin", "pw")
        self.assertIn("Authenticated as superadmin (admin API)", self.out.getvalue())

    @patch("arnold.cli.logout", return_value=False)
    def test_logout_without_session(self, mock_logout):
        code, _ = self.run_cli("auth", "logout", "--api", "shop")
        self.assertEqual(code, 0)
        self.assertIn("No session found for shop API", self.out.getvalue())

    @patch("arnold.cli.status")
    def test_status_checks_both_apis(self, mock_status):
        mock_status.side_effect = [None, "superadmin"]

        code, _ = self.run_cli("auth", "status")

        self.assertEqual(code, 0)
        output = self.out.getvalue()
        self.assertIn("shop: not authenticated", output)
        self.assertIn("admin: authenticated as superadmin", output)

    @patch("arnold.cli.status", return_value="")
    def test_status_expired(self, mock_status):
        self.run_cli("auth", "status", "--api", "shop")
        mock_status.assert_called_once_with(CONFIG.shop_api, "shop")
        self.assertIn("session may be expired", self.out.getvalue())


if __name__ == "__main__":
    unittest.main()
