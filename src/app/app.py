from pathlib import Path

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from happyatlas.colors import index_colorscale
from happyatlas.config import SETTINGS_JSON, load_settings
from happyatlas.loaders import DataLoadError, load_dataset
from happyatlas.state import Coordinator, DashboardView

GUIDE_HTML = """
<h1 style="margin: 0 0 8px 0;">What is HappyAtlas?</h1>
<p style="margin: 0 0 12px 0;">
  HappyAtlas maps the <b>World Happiness Report</b> ladder score by country and year,
  together with the six factors that explain it.
</p>
<h2 style="margin: 16px 0 6px 0;">How to read the colors</h2>
<ul style="margin: 0 0 12px 18px;">
  <li><b>Green → Yellow → Red</b>: rank 1 to rank 100 and below.</li>
  <li><b>Grey</b>: no report data for that country, or its name could not be matched.</li>
  <li>If a country has no entry for the selected year, its latest earlier year is shown
      (or its first year, if the selection is before any data).</li>
</ul>
<h2 style="margin: 16px 0 6px 0;">How to use it</h2>
<ol style="margin: 0 0 12px 18px;">
  <li>Drag the <b>year slider</b> to travel through time.</li>
  <li><b>Click</b> a country to open its trend, factors, pre/post 2020 averages and timeline.</li>
</ol>
<h2 style="margin: 16px 0 6px 0;">Methodology (short)</h2>
<ul style="margin: 0 0 12px 18px;">
  <li>Factor bars are scaled to the largest value of that factor across all countries and years.</li>
  <li>Pre period: 2015–2019. Post period: 2020 onwards. Years without a ladder score are skipped.</li>
  <li>Country names from the report and the map are harmonized to ISO3 codes; unmatched names are excluded.</li>
</ul>
"""

st.set_page_config(page_title="HappyAtlas", page_icon="🌍", layout="wide", initial_sidebar_state="collapsed")
st.markdown("""
<style>
#MainMenu, footer { display:none !important; }
.block-container { padding-top: 1.2rem !important; }
.panel-title{ font-weight:700; font-size: 1.4rem; margin-bottom: 0; }
.panel-ladder{ color:#6b7280; margin-top: 0; }
.event-year{ font-weight:600; }
.event-active{ color:#0ea5a4; }
</style>
""", unsafe_allow_html=True)

settings = load_settings(SETTINGS_JSON if SETTINGS_JSON.exists() else None)


@st.cache_data(show_spinner=False)
def load_cached(csv_path: Path, geo_path: Path, events_path: Path):
    return load_dataset(settings)


def get_coordinator() -> Coordinator:
    if "coordinator" not in st.session_state:
        st.session_state["coordinator"] = Coordinator(
            loader=lambda: load_cached(settings.data_csv, settings.world_geojson, settings.events_json),
            settings=settings,
        )
    return st.session_state["coordinator"]


def map_figure(view: DashboardView, dataset):
    features, keys = [], []
    for i, geom in enumerate(dataset.geometries):
        feature = geom.to_feature()
        feature["id"] = str(i)
        features.append(feature)
        keys.append(str(i))
    fills = view.map.fills
    fig = go.Figure(go.Choropleth(
        geojson={"type": "FeatureCollection", "features": features},
        locations=keys,
        z=list(range(len(fills))),
        zmin=0,
        zmax=max(len(fills) - 1, 1),
        colorscale=index_colorscale([f.color for f in fills]),
        showscale=False,
        hovertext=[f.label for f in fills],
        hoverinfo="text",
        marker_line_color="#aaa",
        marker_line_width=0.5,
    ))
    fig.update_geos(fitbounds="locations", visible=False, projection_type="natural earth")
    fig.update_layout(margin=dict(l=0, r=0, t=0, b=0), height=520)
    return fig


def clicked_code(event, dataset) -> str | None:
    if not event:
        return None
    for p in event["selection"]["points"]:
        loc = p.get("location")
        if loc is None:
            continue
        geom = dataset.geometries[int(loc)]
        if geom.tagged:
            return geom.code
    return None


def trend_figure(panel):
    df = pd.DataFrame([{"year": p.year, "ladder": p.ladder} for p in panel.trend.points])
    fig = px.line(df, x="year", y="ladder", markers=False)
    fig.update_traces(line_color="#4b5563", line_width=1.5)
    if panel.trend.marker is not None:
        fig.add_scatter(x=[panel.trend.marker.year], y=[panel.trend.marker.ladder],
                        mode="markers", marker=dict(size=8, color="#111827"), showlegend=False)
    fig.update_xaxes(tickmode="array", tickvals=list(panel.trend.ticks), title=None)
    fig.update_yaxes(title=None)
    fig.update_layout(height=180, margin=dict(l=8, r=8, t=8, b=8))
    return fig


def draw_panel(panel):
    st.markdown(f'<p class="panel-title">{panel.title}</p>', unsafe_allow_html=True)
    if panel.empty:
        st.info("No report data for this country.")
        return
    note = "" if panel.shown_year == panel.year else f" (showing {panel.shown_year})"
    st.markdown(f'<p class="panel-ladder">Ladder score {panel.year}{note}: <b>{panel.ladder_text or "–"}</b></p>',
                unsafe_allow_html=True)

    if panel.trend.points:
        st.plotly_chart(trend_figure(panel), use_container_width=True, key="trend")

    st.markdown("**Explained by**")
    for bar in panel.factors:
        st.progress(bar.share, text=f"{bar.label}: {bar.text}")

    st.markdown("**Before / after 2020**")
    if not panel.periods.has_data:
        st.caption("No ladder scores in either period.")
    else:
        c1, c2 = st.columns(2)
        c1.metric("2015–2019", "–" if panel.periods.pre is None else f"{panel.periods.pre:.2f}")
        delta = None if panel.periods.change is None else f"{panel.periods.change:+.2f}"
        c2.metric("2020+", "–" if panel.periods.post is None else f"{panel.periods.post:.2f}", delta=delta)

    st.markdown("**Timeline**")
    if not panel.events.has_events:
        st.caption("No recorded events for this country.")
        return
    for entry in panel.events.entries:
        css = "event-year event-active" if entry.is_active else "event-year"
        st.markdown(f'<span class="{css}">{entry.year}</span>', unsafe_allow_html=True)
        if entry.headline:
            st.markdown(f"**{entry.headline}**")
        for text in entry.details:
            st.markdown(f"- {text}")


coord = get_coordinator()

if not st.session_state.get("map_visible"):
    st.markdown(GUIDE_HTML, unsafe_allow_html=True)
    if st.button("Explore the map", type="primary"):
        st.session_state["map_visible"] = True
        st.rerun()
    st.stop()

if not coord.ready:
    try:
        with st.spinner("Loading report, map and timeline..."):
            coord.on_visible()
    except DataLoadError as e:
        st.error(f"Could not load the data: {e}")
        st.stop()

dataset = coord.dataset
years = dataset.years
if not years:
    st.warning("No report rows could be matched to a map shape.")
    st.stop()
start = coord.state.year if coord.state.year in years else years[-1]
year = st.select_slider("Year", options=years, value=start, key="year")
if year != coord.state.year:
    coord.set_year(year)

col_map, col_panel = st.columns([3, 2])
with col_map:
    event = st.plotly_chart(map_figure(coord.view, dataset), use_container_width=True,
                            on_select="rerun", selection_mode="points", key="map")
    code = clicked_code(event, dataset)
    if code is not None and code != coord.state.country:
        coord.select_country(code)

with col_panel:
    if coord.view.panel is None:
        st.info("Click a country on the map to see its details.")
    else:
        draw_panel(coord.view.panel)
