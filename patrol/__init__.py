"""Repository-scoped moderation for GitHub: bans, trust grants and commands."""
