"""Rich-text bodies for the comments posted on Asana tasks.

Asana stories take ``html_text`` wrapped in a single ``<body>`` element.
Values that come from GitHub are escaped; caller supplied comment text is
used as given so workflows can include their own markup.
"""

from html import escape

from asana_sync.models.domain import Commit


def wrap_body(text: str) -> str:
    return f"<body>{text}</body>"


def pull_request_comment(url: str) -> str:
    return wrap_body(f"PR: {escape(url)}")


def approval_comment(url: str) -> str:
    return wrap_body(f"PR: {escape(url)} has been approved")


def commit_comment(commit: Commit) -> str:
    """``<sha7 linked to the commit> <first line of message> [author]``."""
    link = f'<a href="{escape(commit.url)}">{escape(commit.short_id)}</a>'
    return wrap_body(f"<code>{link}</code> {escape(commit.header)} [{escape(commit.author)}]")


def link_comment(label: str, url: str) -> str:
    return wrap_body(f"Link to {label}: {escape(url)}")


def task_url(project_id: str, task_id: str) -> str:
    return f"https://app.asana.com/0/{project_id}/{task_id}/f"


def pull_request_description(body: str, project_id: str, task_id: str) -> str:
    """Prepend the task link to a pull request body."""
    return f"Task/Issue URL: {task_url(project_id, task_id)} \n\n ----- \n{body}"
