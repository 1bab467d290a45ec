import click
import httpx
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box
from config.settings import settings

console = Console()


LEVEL_COLORS = {
    "critical": "bold red", "high": "bold orange3",
    "medium": "bold yellow", "low": "bold green",
}


def banner():
    console.print(f"""
[bold blue]╔══════════════════════════════════════════════╗
║   {settings.APP_NAME}  v{settings.VERSION}                  ║
║   Service Risk Register & CISO Reporting     ║
╚══════════════════════════════════════════════╝[/bold blue]
""")
    mode = "[yellow]MOCK[/yellow]" if settings.MOCK_MODE else "[green]LIVE[/green]"
    console.print(
        f"  Mode: {mode}  |  "
        f"Organization: [bold]{settings.ORGANIZATION_NAME}[/bold]\n"
    )
    for w in settings.validate():
        console.print(f"  [yellow]⚠  {w}[/yellow]")
    console.print()


def _service():
    from services.report_service import ReportService
    with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console) as p:
        t = p.add_task("Loading risk data...", total=None)
        service = ReportService()
        service.refresh()
        p.update(t, description="Data loaded!")
    return service


# fetch failures that end a command with a message instead of a traceback
LOAD_ERRORS = (ConnectionError, httpx.HTTPStatusError)


def _load_failed(e):
    if isinstance(e, httpx.HTTPStatusError):
        console.print(f"\n[red]✘ Backend error:[/red] HTTP {e.response.status_code} "
                      f"on {e.request.url.path}\n")
    else:
        console.print(f"\n[red]✘ Connection failed:[/red] {e}\n")


def _level(value):
    style = LEVEL_COLORS.get(value, "")
    return f"[{style}]{value.upper()}[/{style}]" if style else value.upper()


def _distribution_table(title, dist):
    tbl = Table(title=title, box=box.SIMPLE_HEAVY, header_style="bold cyan")
    tbl.add_column("Value")
    tbl.add_column("Count", justify="right")
    for key, count in dist.items():
        tbl.add_row(str(key), str(count))
    return tbl


def _assessment_table(rows):
    tbl = Table(box=box.SIMPLE_HEAVY, header_style="bold cyan")
    tbl.add_column("Product")
    tbl.add_column("Division")
    tbl.add_column("Team")
    tbl.add_column("Category")
    tbl.add_column("Level", width=10)
    tbl.add_column("Classification")
    tbl.add_column("Likelihood", justify="right")
    tbl.add_column("Owner")
    for row in rows:
        a = row.assessment
        tbl.add_row(row.service.name, row.service.division, row.service.team,
                    a.risk_category, _level(a.risk_level), a.data_classification,
                    f"{a.likelihood_per_year:g}%", a.risk_owner)
    return tbl


@click.group()
def cli():
    """Risk Assessment Hub — service risk register CLI"""
    banner()


@cli.command("overview")
def show_overview():
    """Show totals and risk distributions."""
    try:
        summary = _service().overview()
    except LOAD_ERRORS as e:
        _load_failed(e)
        return

    console.print(Panel(
        f"[bold]Total Risks:[/bold] {summary.total_risks}\n"
        f"[bold]Critical & High:[/bold] [red]{summary.critical_and_high_risks}[/red]\n"
        f"[bold]Services with Risks:[/bold] {summary.services_with_risks}\n"
        f"[bold]Divisions with Risks:[/bold] {summary.divisions_with_risks}\n"
        f"[bold]Weighted Risk Score:[/bold] {summary.weighted_risk_score}/100",
        title="[bold blue]Risk Overview[/bold blue]"
    ))
    console.print(_distribution_table("Risk Level Distribution", summary.level_distribution))
    console.print(_distribution_table("Risk Category Distribution", summary.category_distribution))
    console.print(_distribution_table("Data Classification Distribution",
                                      summary.classification_distribution))


@cli.command("assessments")
@click.option("--search", "-s", default="", help="Free-text filter over every field")
@click.option("--division", default=None, help="Only services of this division")
@click.option("--team", default=None, help="Only services of this team")
def list_assessments(search, division, team):
    """List risk assessments joined with their service, division and team."""
    try:
        rows = _service().rows(search=search, division=division, team=team)
    except LOAD_ERRORS as e:
        _load_failed(e)
        return

    if not rows:
        console.print("[yellow]No risk assessments match.[/yellow]\n")
        return
    console.print(f"\n[bold]Risk Assessments ({len(rows)})[/bold]\n")
    console.print(_assessment_table(rows))


@cli.command("service")
@click.argument("name")
def show_service(name):
    """Show one service (case-insensitive name) and its risk assessments."""
    try:
        service = _service()
    except LOAD_ERRORS as e:
        _load_failed(e)
        return
    detail, assessments = service.service_detail(name)
    if detail is None:
        console.print(f'[red]✘ Service "{name}" not found.[/red]\n')
        return

    console.print(Panel(
        f"[bold]Description:[/bold] {detail.description or 'N/A'}\n"
        f"[bold]Division:[/bold] {detail.division}\n"
        f"[bold]Team:[/bold] {detail.team}\n"
        f"[bold]Created:[/bold] "
        f"{detail.created_at.strftime('%Y-%m-%d') if detail.created_at else 'N/A'}"
        f" by {detail.created_by or 'N/A'}",
        title=f"[bold blue]{detail.name}[/bold blue]"
    ))
    if not assessments:
        console.print("[yellow]No risk assessments recorded for this service.[/yellow]\n")
        return
    for a in assessments:
        bc = LEVEL_COLORS.get(a.risk_level, "white").replace("bold ", "")
        console.print(Panel(
            f"[bold]Description:[/bold] {a.risk_description}\n\n"
            f"[bold]Likelihood:[/bold] {a.likelihood_per_year:g}% per year\n"
            f"[bold]Classification:[/bold] {a.data_classification}  "
            f"[bold]Interface:[/bold] {a.data_interface}  "
            f"[bold]Location:[/bold] {a.data_location}\n"
            f"[bold]Revenue Impact:[/bold] {a.revenue_impact}  "
            f"[bold]PI Data at Risk:[/bold] {a.pi_data_at_risk}\n\n"
            f"[bold]Mitigation:[/bold] {a.mitigation or 'N/A'}\n"
            f"[bold]Owner:[/bold] {a.risk_owner}",
            title=f"[bold]{a.risk_category} · {a.risk_level.upper()}[/bold]",
            border_style=bc,
        ))


@cli.command("ciso-report")
@click.option("--division", default=None, help="Division name (default: REPORT_DIVISION)")
@click.option("--team", default=None, help="Team name (default: REPORT_TEAM)")
@click.option("--no-pdf", is_flag=True, default=False, help="Skip PDF generation")
def ciso_report(division, team, no_pdf):
    """Build the CISO report for one division and team."""
    from reporting.pdf_report import PDFReportGenerator

    try:
        report = _service().ciso_report(division=division, team=team)
    except LOAD_ERRORS as e:
        _load_failed(e)
        return

    m = report.metrics
    score_color = (
        "red" if m.weighted_risk_score >= 75
        else "yellow" if m.weighted_risk_score >= 50
        else "green"
    )
    console.print(Panel(
        f"[bold]Products:[/bold] {m.number_of_products}\n"
        f"[bold]Global Revenue Risks:[/bold] {m.global_revenue_risks}  "
        f"[bold]Local Revenue Risks:[/bold] {m.local_revenue_risks}\n"
        f"[bold]Custom Risks:[/bold] {m.custom_risks}\n"
        f"[bold]Days Since Last Assessment:[/bold] {m.days_since_last_assessment}\n"
        f"[bold]Missing Controls:[/bold] {m.risks_without_controls}\n"
        f"[bold]Median Recovery Time:[/bold] {m.median_recovery_time:g} hrs\n"
        f"[bold]PI Risk Score:[/bold] {m.pi_risk_score}\n"
        f"[bold]Weighted Risk Score:[/bold] [{score_color}]{m.weighted_risk_score}/100[/{score_color}]",
        title=f"[bold blue]CISO Report: {report.division} Division - {report.team} Team[/bold blue]"
    ))
    if not report.has_data:
        console.print("[yellow]⚠  No risk assessments in this scope.[/yellow]")

    if report.rows:
        console.print(_assessment_table(report.rows))

    if not no_pdf:
        console.print("\n[bold]Generating PDF report...[/bold]")
        try:
            pdf_path = PDFReportGenerator(report).generate()
            console.print(f"\n[green]✔ Report saved:[/green] {pdf_path}\n")
        except Exception as e:
            console.print(f"\n[red]✘ PDF generation failed:[/red] {e}\n")


@cli.command("standard-risks")
@click.option("--category", default=None, help="Error, Failure or Malicious")
def standard_risks(category):
    """List the standard risk catalogue."""
    from data.standard_risks import get_standard_risks

    tbl = Table(box=box.SIMPLE_HEAVY, header_style="bold cyan")
    tbl.add_column("Category", width=10)
    tbl.add_column("Risk")
    tbl.add_column("Loss Event Category")
    for r in get_standard_risks(category):
        tbl.add_row(r["category"], r["name"], r["loss_event_category"])
    console.print(tbl)


@cli.command("status")
def check_status():
    """Check configuration and connectivity status."""
    tbl = Table(box=box.ROUNDED, header_style="bold cyan")
    tbl.add_column("Component", style="bold")
    tbl.add_column("Status")
    tbl.add_column("Details")

    if settings.MOCK_MODE:
        tbl.add_row("Backend API", "[yellow]MOCK[/yellow]", "Simulation mode active")
    elif settings.is_backend_configured():
        tbl.add_row("Backend API", "[green]CONFIGURED[/green]", settings.DATA_API_URL)
    else:
        tbl.add_row("Backend API", "[red]NOT CONFIGURED[/red]",
                    "Set DATA_API_URL and DATA_API_KEY in .env")

    tbl.add_row("Report Output", "[green]OK[/green]", str(settings.REPORT_OUTPUT_DIR))
    tbl.add_row("Report Scope", "[green]OK[/green]",
                f"{settings.REPORT_DIVISION} / {settings.REPORT_TEAM}")

    mode_label = "MOCK (safe)" if settings.MOCK_MODE else "LIVE (real API)"
    mode_color = "yellow" if settings.MOCK_MODE else "green"
    tbl.add_row("Current Mode", f"[{mode_color}]{mode_label}[/{mode_color}]", "")
    console.print(tbl)
    console.print()


@cli.command("connect")
def test_connection():
    """Test the backend connection and count each collection."""
    if settings.MOCK_MODE:
        console.print("[yellow]⚠  Currently in MOCK MODE.[/yellow]")
        console.print("Set [bold]MOCK_MODE=false[/bold] in your .env to test real connection.\n")
        return

    if not settings.is_backend_configured():
        console.print("[red]✘ Backend not configured.[/red]")
        console.print("Set DATA_API_URL and DATA_API_KEY in your .env\n")
        return

    console.print("\n[bold]Testing backend connection...[/bold]\n")
    try:
        from integrations.risk_data_client import RiskDataClient
        client = RiskDataClient()
        client.verify_connection()

        with Progress(SpinnerColumn(), TextColumn("{task.description}"),
                      console=console) as p:
            task = p.add_task("Fetching divisions...", total=None)
            divisions = client.get_divisions()
            p.update(task, description="Fetching teams...")
            teams = client.get_teams()
            p.update(task, description="Fetching services...")
            services = client.get_services()
            p.update(task, description="Fetching risk assessments...")
            assessments = client.get_risk_assessments()
            p.update(task, description="Done!")

        tbl = Table(box=box.ROUNDED, header_style="bold cyan")
        tbl.add_column("Resource")
        tbl.add_column("Count", justify="right")
        tbl.add_column("Status")
        tbl.add_row("Divisions",        str(len(divisions)),   "[green]✔[/green]")
        tbl.add_row("Teams",            str(len(teams)),       "[green]✔[/green]")
        tbl.add_row("Services",         str(len(services)),    "[green]✔[/green]")
        tbl.add_row("Risk Assessments", str(len(assessments)), "[green]✔[/green]")
        console.print(tbl)
        console.print("\n[green]✔ Connection successful! Ready to build reports.[/green]\n")

    except ConnectionError as e:
        console.print(f"\n[red]✘ Connection failed:[/red] {e}\n")
        console.print("Troubleshooting:")
        console.print("  1. Verify DATA_API_URL and DATA_API_KEY in .env")
        console.print("  2. Check outbound HTTPS access to the backend host")
        console.print("  3. Confirm row-level security allows reads for this key\n")
    except Exception as e:
        console.print(f"\n[red]✘ Unexpected error:[/red] {e}\n")
