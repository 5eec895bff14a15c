"""
Dialog Controller Module

This module provides the HTTP controller implementation for the Dialog Flow Orchestrator API.
It handles RESTful operations for conversation turns, bridging the HTTP layer
and the application's use cases.
"""

from functools import wraps
from typing import Any, Callable, Dict, Tuple, TypeVar, cast

from flask import Blueprint, jsonify, request
from marshmallow import Schema, ValidationError, fields, validate

from adapters.loggers.logger_adapter import app_logger
from core.domain.errors import DialogOrchestratorError
from core.interfaces.dialog_controller_interface import IDialogController
from core.interfaces.use_case_interfaces import IHandleTurnUseCase

ResponseType = Tuple[Dict[str, Any], int]
F = TypeVar("F", bound=Callable[..., ResponseType])

MAX_TEXT_LENGTH = 4096


class TurnRequestSchema(Schema):
    """
    Schema for validating the turn request payload.

    Attributes:
        text (str): The user's input message.
    """

    text = fields.String(required=True, validate=validate.Length(max=MAX_TEXT_LENGTH))


class ApiResponse:
    """
    Helper class for constructing API responses.
    """

    @staticmethod
    def success(data: Any = None, status_code: int = 200) -> ResponseType:
        """
        Create a success response.

        Args:
            data (Any, optional): The response payload.
            status_code (int): The HTTP status code.

        Returns:
            ResponseType: A tuple of the JSON response and status code.
        """
        response = {"status": "success"}
        if data is not None:
            response["data"] = data
        return jsonify(response), status_code

    @staticmethod
    def error(
        message: str, details: Any = None, status_code: int = 400
    ) -> ResponseType:
        """
        Create an error response.

        Args:
            message (str): The error message.
            details (Any, optional): Additional error details.
            status_code (int): The HTTP status code.

        Returns:
            ResponseType: A tuple of the JSON response and status code.
        """
        response = {"status": "error", "message": message}
        if details is not None:
            response["details"] = details
        return jsonify(response), status_code


def validate_conversation_id(f: F) -> F:
    """
    Decorator to validate that the conversation_id parameter is a non-empty string.

    Args:
        f (Callable): The function to decorate.

    Returns:
        Callable: The decorated function.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs) -> ResponseType:
        conversation_id = kwargs.get(
            "conversation_id", args[1] if len(args) > 1 else None
        )
        if (
            not conversation_id
            or not isinstance(conversation_id, str)
            or not conversation_id.strip()
        ):
            app_logger.error("Invalid conversation ID: %s", conversation_id)
            return ApiResponse.error("Invalid conversation ID", status_code=400)
        return f(*args, **kwargs)

    return cast(F, decorated_function)


class DialogController(IDialogController):
    """
    HTTP controller for handling conversation API requests.

    This controller acts as an adapter between the HTTP layer and the handle turn use case.
    """

    def __init__(self, handle_turn_uc: IHandleTurnUseCase):
        """
        Initialize the DialogController.

        Args:
            handle_turn_uc (IHandleTurnUseCase): The use case running conversation turns.
        """
        self.handle_turn_uc = handle_turn_uc

    @validate_conversation_id
    def handle_message(self, conversation_id: str) -> ResponseType:
        """
        Run one turn of the conversation with the user's message.

        Expects a JSON payload with the following structure:
            {
                "text": "User's input message"
            }

        Args:
            conversation_id (str): The unique identifier for the conversation.

        Returns:
            ResponseType: The turn result and the bot's replies, or an error message.

        Raises:
            DialogOrchestratorError: Left to the application error handlers.
        """
        try:
            data = request.get_json(silent=True) or {}
            validated_data = TurnRequestSchema().load(data)
            user_text = validated_data["text"]

            report = self.handle_turn_uc.execute(conversation_id, user_text)
            return ApiResponse.success(
                {
                    "result": report.result.value,
                    "messages": [message.to_dict() for message in report.messages],
                    "steps": [record.step for record in report.steps],
                },
                status_code=200,
            )
        except ValidationError as err:
            app_logger.error("Validation error: %s", err.messages)
            return ApiResponse.error(
                "Validation error", details=err.messages, status_code=400
            )
        except DialogOrchestratorError:
            raise
        except Exception as e:
            app_logger.error(
                "Error handling turn for conversation %s: %s",
                conversation_id,
                str(e),
                exc_info=True,
            )
            return ApiResponse.error("Internal server error", status_code=500)

    @validate_conversation_id
    def get_state(self, conversation_id: str) -> ResponseType:
        """
        Return the persisted state of the conversation.

        Args:
            conversation_id (str): The unique identifier for the conversation.

        Returns:
            ResponseType: The conversation state, or 404 if the conversation is unknown.
        """
        state = self.handle_turn_uc.get_state(conversation_id)
        if state is None:
            return ApiResponse.error("Conversation not found", status_code=404)
        return ApiResponse.success(state.to_dict(), status_code=200)


def create_dialog_blueprint(handle_turn_uc: IHandleTurnUseCase) -> Blueprint:
    """
    Create and configure a Flask blueprint for conversation API endpoints.

    Args:
        handle_turn_uc (IHandleTurnUseCase): The use case running conversation turns.

    Returns:
        Blueprint: The configured Flask blueprint.
    """
    blueprint = Blueprint("dialog", __name__, url_prefix="/api/dialog")
    controller = DialogController(handle_turn_uc)

    @blueprint.route("/<string:conversation_id>", methods=["POST"])
    def handle_message(conversation_id: str):
        return controller.handle_message(conversation_id)

    @blueprint.route("/<string:conversation_id>/state", methods=["GET"])
    def get_state(conversation_id: str):
        return controller.get_state(conversation_id)

    return blueprint
