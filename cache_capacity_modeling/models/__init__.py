from typing import Any
from typing import Dict
from typing import Optional

from pydantic import BaseModel


class SizingModel:
    """Stateless interface for defining a sizing model

    To define a sizing model you must implement one pure function,
    `calculate`, which takes a request (a frozen pydantic model of type
    `request_type`) and returns a result model describing how much
    CPU/RAM/disk etc ... is required. Because requests are immutable values
    and models hold no state, callers are free to memoize results by request.
    """

    request_type: type = BaseModel

    @staticmethod
    def calculate(request: Any) -> Optional[BaseModel]:
        """Given a concrete request, return the sized result

        Your model must either:
            * Return None to indicate the request cannot be satisfied
            * Return a result model with the model's calculation
        """
        # quiet pylint
        _ = request
        return None

    @staticmethod
    def description() -> str:
        """Optional description of the model"""
        return "No description"

    @classmethod
    def default_request(cls) -> BaseModel:
        """Request built purely from the documented defaults"""
        return cls.request_type()

    @classmethod
    def request_schema(cls) -> Dict[str, Any]:
        return cls.request_type.model_json_schema()
