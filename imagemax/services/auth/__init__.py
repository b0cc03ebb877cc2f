from imagemax.services.auth.identity import CurrentUser, get_current_user, issue_token, verify_token

__all__ = ["CurrentUser", "get_current_user", "issue_token", "verify_token"]
