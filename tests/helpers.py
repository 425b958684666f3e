"""
Builders for calendar pages used across the test suite.

The markup mirrors one event row of the FDA calendar table.
"""


BTX = {
    "price": "$1.26",
    "url": "https://www.biopharmcatalyst.com/company/BTX",
    "symbol": "BTX",
    "date": "05/02/2019",
    "drug": "OpRegen",
    "indication": "Dry age-related macular degeneration (AMD)",
    "note": "Phase 1/2 enrolment to be completed 2019. Updated data due  May 2, 2019,10:15am ET at ARVO.",
    "phase": "Phase 1/2",
    "label": "phase1.5",
}

GWPH = {
    "price": "$173.16",
    "url": "https://www.biopharmcatalyst.com/company/GWPH",
    "symbol": "GWPH",
    "date": "05/03/2019",
    "drug": "Epidiolex GWPCARE2",
    "indication": "Dravet Syndrome",
    "note": "Phase 3 data to be presented at AAN in late-breaker May 7, 2019. Abstract embargoed until May 3, 2019.",
    "phase": "Phase 3",
    "label": "phase3",
}

EYEN = {
    "price": "$6.00",
    "url": "https://www.biopharmcatalyst.com/company/EYEN",
    "symbol": "EYEN",
    "date": "05/03/2019",
    "drug": "MicroStat",
    "indication": "Mydriasis - pupil dilation",
    "note": "Phase 3 trial met primary endpoint - January 31, 2019. Detailed data due at (ASCRS) meeting May 3-7, 2019.",
    "phase": "Phase 3",
    "label": "phase3",
}


def make_row(**overrides) -> str:
    """Render one event row; pass a field as None to leave its cell out."""
    fields = dict(BTX)
    fields.update(overrides)

    cells = []
    if fields["url"] is not None:
        cells.append(f'<a href="{fields["url"]}" class="ticker">{fields["symbol"]}</a>')
    if fields["price"] is not None:
        cells.append(f'<div class="price">\n  {fields["price"]}\n</div>')
    first = f"<td>{''.join(cells)}</td>"

    drug = ""
    if fields["drug"] is not None:
        drug += f'<strong class="drug">{fields["drug"]}</strong>'
    if fields["indication"] is not None:
        drug += f'<div class="indication">{fields["indication"]}</div>'

    phase = ""
    if fields["phase"] is not None:
        phase = (
            f'<td class="js-td--stage" data-value="{fields["label"]}">\n'
            f'  {fields["phase"]}\n</td>'
        )

    when = ""
    if fields["date"] is not None:
        when += f'<time class="catalyst-date">{fields["date"]}</time>'
    if fields["note"] is not None:
        when += f'<div class="catalyst-note">{fields["note"]}</div>'

    return (
        '<tr class="js-tr js-drug">'
        f"{first}<td>{drug}</td>{phase}<td>{when}</td>"
        "</tr>"
    )


def make_document(*rows: str) -> str:
    """Wrap rendered rows in a calendar page."""
    return (
        "<html><body><table class=\"calendar\">"
        "<thead><tr><th>Ticker</th><th>Drug</th><th>Stage</th><th>Catalyst</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table></body></html>"
    )

