import html

from app.models.estimate import EstimateResult, EstimateView, ViewState


def _weather_line(result: EstimateResult) -> str | None:
    usage = result.usage
    if usage.temperature_c is None:
        return None
    return (
        f"{usage.temperature_c:.1f} °C, {usage.humidity_pct:.0f}% humidity, "
        f"wind {usage.wind_kph:.1f} km/h"
    )


def build_view(result: EstimateResult) -> EstimateView:
    address, house, usage = result.address, result.house, result.usage
    return EstimateView(
        state=ViewState.results,
        full_address=address.label,
        city=address.city,
        region=address.region,
        country=address.country,
        house_size=f"{house.size:,} sq ft",
        size_range=house.size_range,
        window_count=f"{house.windows} windows",
        energy_usage=f"{usage.monthly:,.2f} kWh/month",
        annual_usage=f"{usage.annual:,.2f} kWh/year",
        weather=_weather_line(result),
    )


def build_error_view(message: str) -> EstimateView:
    return EstimateView(state=ViewState.error, message=message)


_TEXT_FIELDS = (
    ("Address", "full_address"),
    ("City", "city"),
    ("Region", "region"),
    ("Country", "country"),
    ("House size", "house_size"),
    ("Size range", "size_range"),
    ("Windows", "window_count"),
    ("Energy usage", "energy_usage"),
    ("Annual usage", "annual_usage"),
    ("Weather", "weather"),
)


def render_text(view: EstimateView) -> str:
    if view.state == ViewState.error:
        return f"Error: {view.message}"
    if view.state == ViewState.loading:
        return "Loading..."
    lines = []
    for label, field in _TEXT_FIELDS:
        value = getattr(view, field)
        if value is not None:
            lines.append(f"{label + ':':<14} {value}")
    return "\n".join(lines)


_PAGE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Home Energy Estimator</title>
</head>
<body>
<h1>Home Energy Estimator</h1>
<form method="get" action="/">
  <input type="text" name="address" value="{query}" placeholder="Address or postal code" required>
  <button type="submit">Estimate</button>
</form>
{body}
</body>
</html>
"""


def render_html(view: EstimateView | None, query: str = "") -> str:
    """Render the form page; ``view`` is None before the first submission."""
    if view is None:
        body = ""
    elif view.state == ViewState.error:
        body = f'<div id="errorContainer"><p id="errorMessage">{html.escape(view.message or "")}</p></div>'
    elif view.state == ViewState.loading:
        body = '<div id="loadingIndicator">Loading...</div>'
    else:
        rows = "\n".join(
            f"  <dt>{label}</dt><dd>{html.escape(getattr(view, field))}</dd>"
            for label, field in _TEXT_FIELDS
            if getattr(view, field) is not None
        )
        body = f'<dl id="resultsContainer">\n{rows}\n</dl>'
    return _PAGE.format(query=html.escape(query, quote=True), body=body)
