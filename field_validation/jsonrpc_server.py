#!/usr/bin/env python3
"""
JSON-RPC 2.0 Server for ValidationService

Exposes rule parsing and field validation to any process that can speak
newline-delimited JSON over stdin/stdout.

Protocol: JSON-RPC 2.0 over stdin/stdout (newline-delimited JSON)
Specification: https://www.jsonrpc.org/specification

Usage:
    python -m field_validation.jsonrpc_server [--debug]

Example request (stdin):
    {"jsonrpc":"2.0","id":1,"method":"validate","params":{"rules":"required|email","value":"a@b"}}

Example response (stdout):
    {"jsonrpc":"2.0","id":1,"result":{"is_valid":false,"message":"Must be a valid email address. "}}

Field registration is synchronous over this transport: validate_field
validates immediately instead of waiting for a debounce window.
"""

import argparse
import json
import signal
import sys
import traceback
from typing import Any, Dict, Optional

from field_validation import ValidationService
from field_validation.exceptions import ConfigurationError


class ValidationJsonRpcServer:
    """Serves one ValidationService to a line-oriented JSON-RPC 2.0 client."""

    # Standard codes, plus one application code for rule configuration
    ERROR_PARSE = -32700        # Invalid JSON
    ERROR_INVALID_REQUEST = -32600  # Invalid JSON-RPC structure
    ERROR_METHOD_NOT_FOUND = -32601  # Unknown method
    ERROR_INVALID_PARAMS = -32602   # Invalid parameters
    ERROR_INTERNAL = -32000      # Application error (catch-all)
    ERROR_CONFIGURATION = -32001    # Bad field registration / rule configuration

    def __init__(self, debug: bool = False, service: Optional[ValidationService] = None):
        """
        Initialize JSON-RPC server.

        Args:
            debug: Enable debug logging to stderr
            service: ValidationService to wrap (created from bundled config if omitted)
        """
        self.service = service or ValidationService()
        self.running = False
        self.debug = debug

        # method name -> handler(params)
        self.methods = {
            'parse_rules': self._handle_parse_rules,
            'validate': self._handle_validate,
            'add_validator': self._handle_add_validator,
            'remove_validator': self._handle_remove_validator,
            'validate_field': self._handle_validate_field,
            'validation_summary': self._handle_validation_summary,
            'list_rules': self._handle_list_rules,
        }

    def _log(self, message: str):
        """Debug trace on stderr; stdout carries only responses."""
        if self.debug:
            sys.stderr.write(f"[DEBUG] {message}\n")
            sys.stderr.flush()

    def start_server(self):
        """
        Answer one request per stdin line until EOF or stop_server().

        Blank lines are skipped. Each response is written to stdout as a
        single line, in request order.
        """
        self.running = True
        self._log("ValidationService JSON-RPC server started")

        while self.running:
            try:
                line = sys.stdin.readline()

                if not line:
                    self._log("EOF received, shutting down")
                    break

                if not line.strip():
                    continue

                self._log(f"Received: {line.strip()}")
                response = self.handle_request(line)
                self._send_response(response)

            except KeyboardInterrupt:
                self._log("KeyboardInterrupt received, shutting down")
                break

            except Exception as e:
                self._log(f"Loop aborted: {e}")
                traceback.print_exc(file=sys.stderr)
                break

        self._log("Server stopped")

    def stop_server(self):
        """Ask the loop to exit after the request in flight has been answered."""
        self.running = False
        self._log("Stop requested")

    def handle_request(self, request_json: str) -> Dict[str, Any]:
        """
        Dispatch one request line to the matching service call.

        Configuration problems (bad rule strings, missing attributes) map to
        ERROR_CONFIGURATION, unknown fields and bad params to
        ERROR_INVALID_PARAMS. Never raises.

        Args:
            request_json: One JSON-RPC request

        Returns:
            Response dict carrying either result or error
        """
        request_id = None

        try:
            try:
                request = json.loads(request_json)
            except json.JSONDecodeError as e:
                return self._error_response(None, self.ERROR_PARSE,
                                            f"Parse error: {e}")

            if not isinstance(request, dict):
                return self._error_response(None, self.ERROR_INVALID_REQUEST,
                                            "Request must be a JSON object")

            if request.get("jsonrpc") != "2.0":
                return self._error_response(None, self.ERROR_INVALID_REQUEST,
                                            f"Invalid JSON-RPC version: {request.get('jsonrpc')}")

            request_id = request.get("id")
            method = request.get("method")
            params = request.get("params", {})

            if not method:
                return self._error_response(request_id, self.ERROR_INVALID_REQUEST,
                                            "Missing 'method' field")

            if not isinstance(params, dict):
                return self._error_response(request_id, self.ERROR_INVALID_PARAMS,
                                            f"Params must be an object, got {type(params).__name__}")

            if method not in self.methods:
                return self._error_response(request_id, self.ERROR_METHOD_NOT_FOUND,
                                            f"Method not found: {method}")

            self._log(f"Dispatching method: {method}")
            result = self.methods[method](params)

            return self._success_response(request_id, result)

        except ConfigurationError as e:
            self._log(f"Configuration error: {e}")
            return self._error_response(request_id, self.ERROR_CONFIGURATION, str(e))

        except ValueError as e:
            self._log(f"Invalid params: {e}")
            return self._error_response(request_id, self.ERROR_INVALID_PARAMS, str(e))

        except Exception as e:
            self._log(f"Error processing request: {e}")
            return self._error_response(request_id, self.ERROR_INTERNAL,
                                        f"Internal error: {e}")

    # Handlers: params dict in, JSON-serialisable result out

    def _handle_parse_rules(self, params: Dict[str, Any]) -> Any:
        """Handle 'parse_rules' method."""
        rules = _require_str(params, 'rules')
        return self.service.parse_rules(rules)

    def _handle_validate(self, params: Dict[str, Any]) -> Any:
        """Handle 'validate' method (one-off rule string + value)."""
        rules = _require_str(params, 'rules')
        return self.service.validate_value(rules, params.get('value')).to_dict()

    def _handle_add_validator(self, params: Dict[str, Any]) -> Any:
        """Handle 'add_validator' method."""
        attrs = {k: v for k, v in params.items() if k != 'on_result'}
        # debounce makes no sense over a request/response transport
        attrs.setdefault('typing_limit_ms', 0)
        self.service.add_validator(attrs)
        return {"status": "ok", "field": attrs.get('name')}

    def _handle_remove_validator(self, params: Dict[str, Any]) -> Any:
        """Handle 'remove_validator' method."""
        names = params.get('names', params.get('name'))
        if not names:
            raise ValueError("Missing required parameter: name")
        self.service.remove_validator(names)
        return {"status": "ok"}

    def _handle_validate_field(self, params: Dict[str, Any]) -> Any:
        """Validate a registered field; a missing value is validated as undefined."""
        name = _require_str(params, 'name')
        return self.service.validate_field(name, params.get('value')).to_dict()

    def _handle_validation_summary(self, params: Dict[str, Any]) -> Any:
        """Handle 'validation_summary' method."""
        # No parameters required
        return {
            "is_valid": self.service.is_form_valid(),
            "errors": self.service.validation_summary(),
        }

    def _handle_list_rules(self, params: Dict[str, Any]) -> Any:
        """Handle 'list_rules' method."""
        # No parameters required
        return self.service.list_rules()

    # Envelopes

    def _success_response(self, request_id: Any, result: Any) -> Dict[str, Any]:
        """Wrap a handler result in a response envelope."""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": result
        }

    def _error_response(self, request_id: Any, code: int, message: str,
                        data: Optional[Any] = None) -> Dict[str, Any]:
        """Build an error envelope; data is only included when given."""
        error = {
            "code": code,
            "message": message
        }
        if data is not None:
            error["data"] = data

        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": error
        }

    def _send_response(self, response: Dict[str, Any]):
        """Write one response line to stdout and flush it."""
        response_json = json.dumps(response)
        self._log(f"Sending: {response_json}")
        sys.stdout.write(response_json + "\n")
        sys.stdout.flush()


def _require_str(params: Dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Missing required parameter: {key}")
    return value


def main():
    """Console entry point (field-validation-rpc)."""
    parser = argparse.ArgumentParser(
        description="Field validation JSON-RPC 2.0 Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example usage:
  python -m field_validation.jsonrpc_server
  python -m field_validation.jsonrpc_server --debug

Supported methods:
  - parse_rules
  - validate
  - add_validator
  - remove_validator
  - validate_field
  - validation_summary
  - list_rules

Protocol: JSON-RPC 2.0 over stdin/stdout
See: https://www.jsonrpc.org/specification
        """
    )
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging to stderr')

    args = parser.parse_args()

    server = ValidationJsonRpcServer(debug=args.debug)

    def signal_handler(sig, frame):
        server.stop_server()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    server.start_server()


if __name__ == "__main__":
    main()
