"""Plain-text usage message returned for malformed requests."""

_USAGE = """\
linkpreview: fetch a web page and return its preview metadata as JSON.

Usage:
  GET {base}/?q=<url>
      Preview an absolute http(s) URL. The URL must be percent-encoded.
      Response: {{"title", "description", "url", "image", "charset"}}
      or {{"error"}} when the page answered with an HTTP error.

  GET {base}/avatar/<username>
      Re-serve the profile image of <username> ({profile}).

Examples:
  {base}/?q=https%3A%2F%2Fexample.com%2F
  {base}/avatar/octocat
"""


def render_usage(base_url: str, profile_template: str = "https://github.com/{username}") -> str:
    """Render the help text for the service mounted at *base_url*."""
    return _USAGE.format(
        base=base_url.rstrip("/"),
        profile=profile_template.replace("{username}", "<username>"),
    )
