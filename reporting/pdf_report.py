import os
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (SimpleDocTemplate, Paragraph, Spacer, Table,
                                TableStyle, PageBreak)
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from models.report import CISOReport
from models.risk import RiskLevel
from data.standard_risks import STANDARD_RISKS
from config.settings import settings
from loguru import logger

DARK_BLUE = colors.HexColor("#0D2B45")
BLUE = colors.HexColor("#1565C0")
GRAY = colors.HexColor("#F5F7FA")
LEVEL_COLORS = {
    RiskLevel.CRITICAL.value: colors.HexColor("#EF4444"),
    RiskLevel.HIGH.value: colors.HexColor("#F97316"),
    RiskLevel.MEDIUM.value: colors.HexColor("#F59E0B"),
    RiskLevel.LOW.value: colors.HexColor("#22C55E"),
}


def format_euro(value) -> str:
    return f"{value:,.0f} €".replace(",", ".")


class PDFReportGenerator:
    def __init__(self, report: CISOReport, output_dir=None):
        self.report = report
        self.output_dir = Path(output_dir or settings.REPORT_OUTPUT_DIR)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self) -> str:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        scope = f"{self.report.division}_{self.report.team}".replace(" ", "-")
        path = os.path.join(self.output_dir, f"CISO_Report_{scope}_{ts}.pdf")
        doc = SimpleDocTemplate(path, pagesize=letter,
                                rightMargin=0.75*inch, leftMargin=0.75*inch,
                                topMargin=0.75*inch, bottomMargin=0.75*inch)
        story = []
        story += self._cover()
        story.append(PageBreak())
        story += self._exec_summary()
        story += self._metrics()
        story += self._distributions()
        story += self._register()
        story += self._financial_loss()
        story += self._standard_risks()
        doc.build(story)
        logger.info(f"PDF generated: {path}")
        return path

    def _h1(self, text):
        return Paragraph(f"<font color='#0D2B45'><b>{text}</b></font>",
                         ParagraphStyle("h1", fontSize=16, spaceAfter=8, spaceBefore=16))

    def _body(self, text):
        return Paragraph(text, ParagraphStyle("body", fontSize=10, leading=14,
                                              alignment=TA_JUSTIFY, spaceAfter=8))

    def _table(self, rows, col_widths, header_color=BLUE, extra=None):
        t = Table(rows, colWidths=col_widths, repeatRows=1)
        style = [
            ("BACKGROUND", (0,0), (-1,0), header_color),
            ("TEXTCOLOR", (0,0), (-1,0), colors.white),
            ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
            ("FONTSIZE", (0,0), (-1,-1), 9),
            ("ROWBACKGROUNDS", (0,1), (-1,-1), [GRAY, colors.white]),
            ("GRID", (0,0), (-1,-1), 0.5, colors.lightgrey),
            ("TOPPADDING", (0,0), (-1,-1), 5),
            ("BOTTOMPADDING", (0,0), (-1,-1), 5),
            ("LEFTPADDING", (0,0), (-1,-1), 6),
        ]
        t.setStyle(TableStyle(style + (extra or [])))
        return t

    def _cover(self):
        title_style = ParagraphStyle("title", fontSize=24, leading=30, textColor=colors.white,
                                     alignment=TA_CENTER, fontName="Helvetica-Bold")
        header = Table([[Paragraph(
            f'<b>{settings.APP_NAME}</b><br/>CISO Report<br/>'
            f'<font size="14">{escape(self.report.division)} Division - '
            f'{escape(self.report.team)} Team</font>',
            title_style
        )]], colWidths=[7*inch])
        header.setStyle(TableStyle([
            ("BACKGROUND", (0,0), (-1,-1), DARK_BLUE),
            ("ALIGN", (0,0), (-1,-1), "CENTER"),
            ("TOPPADDING", (0,0), (-1,-1), 40),
            ("BOTTOMPADDING", (0,0), (-1,-1), 40),
        ]))
        meta = Table([
            ["Organization:", self.report.organization_name],
            ["Date:", self.report.generated_at.strftime("%B %d, %Y")],
            ["Weighted Risk Score:", f"{self.report.metrics.weighted_risk_score} / 100"],
            ["Classification:", "CONFIDENTIAL"],
        ], colWidths=[2*inch, 5*inch])
        meta.setStyle(TableStyle([
            ("FONTNAME", (0,0), (0,-1), "Helvetica-Bold"),
            ("FONTSIZE", (0,0), (-1,-1), 10),
            ("ROWBACKGROUNDS", (0,0), (-1,-1), [GRAY, colors.white]),
            ("TOPPADDING", (0,0), (-1,-1), 6),
            ("BOTTOMPADDING", (0,0), (-1,-1), 6),
            ("LEFTPADDING", (0,0), (-1,-1), 8),
        ]))
        return [header, Spacer(1, 0.3*inch), meta]

    def _exec_summary(self):
        els = [self._h1("Executive Summary")]
        if self.report.summary_text:
            for para in self.report.summary_text.split("\n\n"):
                if para.strip():
                    els.append(self._body(escape(para.strip())))
        return els

    def _metrics(self):
        m = self.report.metrics
        data = [
            ["Metric", "Value"],
            ["Products", str(m.number_of_products)],
            ["Global Revenue Risks", str(m.global_revenue_risks)],
            ["Local Revenue Risks", str(m.local_revenue_risks)],
            ["Custom Risks", str(m.custom_risks)],
            ["Days Since Last Assessment", str(m.days_since_last_assessment)],
            ["Missing Controls", str(m.risks_without_controls)],
            ["Median Recovery Time", f"{m.median_recovery_time:g} hrs"],
            ["PI Risk Score", str(m.pi_risk_score)],
            ["Weighted Risk Score", f"{m.weighted_risk_score} / 100"],
            ["Additional Loss Event Costs", format_euro(m.total_loss_event_costs)],
        ]
        return [self._h1("Key Metrics"), self._table(data, [3.5*inch, 3.5*inch])]

    def _distributions(self):
        els = [self._h1("Risk Distributions")]
        sections = [
            ("Risk Level", self.report.level_distribution),
            ("Risk Category", self.report.category_distribution),
            ("Data Classification", self.report.classification_distribution),
        ]
        for label, dist in sections:
            if not dist:
                continue
            rows = [[label, "Count"]] + [[str(k), str(v)] for k, v in dist.items()]
            els += [self._table(rows, [3.5*inch, 3.5*inch]), Spacer(1, 0.15*inch)]
        if len(els) == 1:
            els.append(self._body("No risk assessments recorded for this scope."))
        return els

    def _register(self):
        els = [PageBreak(), self._h1("Risk Register")]
        rows = [["Product", "Category", "Level", "Classification", "Owner"]]
        extra = []
        for i, row in enumerate(self.report.rows, 1):
            a = row.assessment
            rows.append([row.service.name, a.risk_category, a.risk_level.upper(),
                         a.data_classification, a.risk_owner])
            c = LEVEL_COLORS.get(a.risk_level, colors.gray)
            extra += [("TEXTCOLOR", (2,i), (2,i), c),
                      ("FONTNAME", (2,i), (2,i), "Helvetica-Bold")]
        els.append(self._table(rows, [1.6*inch, 1.4*inch, 0.9*inch, 1.3*inch, 1.8*inch],
                               header_color=DARK_BLUE, extra=extra))
        return els

    def _financial_loss(self):
        losses = {}
        for row in self.report.rows:
            cost = row.assessment.additional_loss_event_costs
            if cost:
                key = row.assessment.risk_category
                losses[key] = losses.get(key, 0) + cost
        els = [self._h1("Financial Loss by Risk Category")]
        if not losses:
            els.append(self._body("No additional loss event costs recorded."))
            return els
        rows = [["Risk Category", "Amount"]]
        rows += [[k, format_euro(v)] for k, v in sorted(losses.items(), key=lambda kv: -kv[1])]
        els.append(self._table(rows, [3.5*inch, 3.5*inch]))
        els.append(self._body(
            f"<b>Total potential financial loss:</b> {format_euro(sum(losses.values()))}"))
        return els

    def _standard_risks(self):
        els = [PageBreak(), self._h1("Standard Risk Catalogue")]
        rows = [["Category", "Risk", "Loss Event Category"]]
        cell = ParagraphStyle("cell", fontSize=8, leading=10)
        for r in STANDARD_RISKS:
            rows.append([r["category"], Paragraph(escape(r["name"]), cell),
                         Paragraph(escape(r["loss_event_category"]), cell)])
        els.append(self._table(rows, [1.0*inch, 3.8*inch, 2.2*inch]))
        return els
