from kieai.core.http.client import HttpClient

__all__ = ["HttpClient"]
