"""Recipe execution core for driving the Salesforce CLI."""

__version__ = "0.1.0"
