"""Prompt construction for portfolio report generation."""
from stockllm.services.report_sections import ReportFormat

ASSET_TABLE_HEADER = "Asset Name | Type | Amount Invested | Current Value"


def build_report_prompt(portfolio_text: str, goal: str, report_format: ReportFormat) -> str:
    """
    Build the generation prompt for a portfolio report.

    Args:
        portfolio_text: Portfolio data extracted from the user's screenshots
        goal: The user's investment goal
        report_format: Section layout the model must follow

    Returns:
        Prompt text listing every required section header verbatim
    """
    count = report_format.expected_count
    required = "\n".join(spec.header for spec in report_format.sections)

    instructions = [
        f"- Respond using EXACTLY {count} sections below in order.",
        "- Use exact titles and format like: 1. *Section Title*",
        "- Each section should be 2-4 short paragraphs.",
        "- Do NOT add intro or extra commentary.",
        f"- Begin with section 1 and end after section {count}.",
    ]
    assets = report_format.section("assets")
    if assets is not None:
        instructions.append(
            f"- In section {assets.index}, list every holding as a table, one row per asset, "
            f"with the header row: {ASSET_TABLE_HEADER}"
        )

    return (
        "You are a professional financial advisor AI. Analyze the portfolio data "
        "and provide a structured investment report.\n\n"
        "PORTFOLIO DATA (from multiple images):\n"
        f"{portfolio_text}\n\n"
        f'USER GOAL: "{goal}"\n\n'
        "INSTRUCTIONS:\n"
        + "\n".join(instructions)
        + "\n\nREQUIRED SECTIONS:\n\n"
        + required
        + "\n"
    )
