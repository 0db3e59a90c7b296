from abc import ABC, abstractmethod


class AbstractTransport(ABC):
	"""Interface for transports that deliver a serialized document to the registry."""

	@abstractmethod
	def post(self, payload: str, signature: str) -> int:
		"""Send one document creation request.

		Args:
			payload: Serialized JSON document.
			signature: Opaque caller signature attached to the request.

		Returns:
			int: HTTP status code returned by the registry (any status, not only 2xx).

		Raises:
			TransportAppError: If the request could not be completed.
		"""
		...

	def close(self) -> None:
		"""Release any pooled connections. No-op by default."""
