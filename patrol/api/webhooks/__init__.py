"""GitHub webhook receiver.

Usage
-----
Import the resource for route registration::

    from patrol.api.webhooks.resources import GitHubWebhookResource
"""
