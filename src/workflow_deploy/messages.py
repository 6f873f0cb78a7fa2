"""Commit-message templates for workflow deployments."""


def commit_message(label: str, *, file_existed: bool, forced_refresh: bool) -> str:
    """Pick the add / update / refresh template for the given situation."""
    if forced_refresh:
        return (
            f"chore: refresh {label}\n"
            "\n"
            "- Ensure workflow file is synchronized with latest version\n"
            "- Force update to maintain consistency across repositories"
        )
    if file_existed:
        return (
            f"chore: update {label}\n"
            "\n"
            "- Update automated code quality analysis configuration\n"
            "- Ensure latest workflow version is used\n"
            "- Uses organization's reusable workflow for consistency"
        )
    return (
        f"feat: add {label}\n"
        "\n"
        "- Add automated code quality analysis to this repository\n"
        "- Workflow runs on push to main branch\n"
        "- Uses organization's reusable workflow for consistency"
    )
