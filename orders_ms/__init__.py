"""Orders microservice: order lifecycle over Redis Streams request/reply."""

__version__ = "0.1.0"
