from __future__ import annotations

import time

import pandas as pd
import plotly.express as px
import streamlit as st

from fleetops.config import Config
from fleetops.orchestrator.clock import SimulationClock
from fleetops.orchestrator.sim import Simulation


STATUS_COLORS = {
	"takeoff": "#38bdf8",
	"cruising": "#a3a3a3",
	"landing": "#22c55e",
	"holding": "#eab308",
	"emergency": "#ef4444",
	"landed": "#475569",
}

st.set_page_config(page_title="Fleet Operations", layout="wide")
st.title("Fleet Operations")

with st.sidebar:
	st.header("Parameters")
	seed = st.number_input("Seed", min_value=0, value=42, step=1)
	period = st.slider("Tick period (s)", 0.5, 5.0, 1.0, step=0.5)
	st.divider()
	st.header("Open behaviour")
	enforce = st.checkbox("Hold flights when no runway is free", value=False)
	complete = st.checkbox("Landing flights reach LANDED", value=False)
	if st.button("Start Simulation") or "sim" not in st.session_state:
		old = st.session_state.get("clock")
		if old is not None:
			old.stop()
		cfg = Config(seed=int(seed), tick_seconds=period, enforce_runway_capacity=enforce, complete_landings=complete)
		sim = Simulation(cfg)
		clock = SimulationClock(sim)
		clock.start()
		st.session_state["sim"] = sim
		st.session_state["clock"] = clock
	live = st.checkbox("Live refresh", value=True)

sim: Simulation = st.session_state["sim"]

c1, c2 = st.columns(2)
with c1:
	if st.button("Add Flight", use_container_width=True):
		sim.add_flight()
with c2:
	if st.button("Trigger Emergency", type="primary", use_container_width=True):
		sim.trigger_emergency()

for alert in sim.drain_alerts():
	st.toast(f"[{alert.type}] {alert.message}", icon="🚨" if alert.level == "critical" else None)

stats = sim.get_stats()
cols = st.columns(6)
cols[0].metric("Flights", stats["total"])
cols[1].metric("Active", stats["active"])
cols[2].metric("Takeoff", stats["takeoff"])
cols[3].metric("Cruising", stats["cruising"])
cols[4].metric("Landed", stats["landed"])
cols[5].metric("Emergencies", len(sim.get_emergencies()))

flights = sim.flights_frame()
airports = sim.airports_frame()

st.subheader("Map")
if not flights.empty:
	fig = px.scatter_geo(
		flights,
		lat="latitude",
		lon="longitude",
		color="status",
		color_discrete_map=STATUS_COLORS,
		hover_name="id",
		hover_data=["altitude", "speed", "fuel_level", "departure_airport", "arrival_airport"],
	)
	fig.add_scattergeo(
		lat=airports["latitude"],
		lon=airports["longitude"],
		text=airports["code"],
		mode="markers+text",
		marker={"symbol": "square", "size": 9, "color": "#f8fafc"},
		name="airports",
	)
	fig.update_geos(fitbounds="locations", showcountries=True)
	fig.update_layout(height=520, margin={"l": 0, "r": 0, "t": 0, "b": 0})
	st.plotly_chart(fig, use_container_width=True)

st.subheader("Dispatch Order")
st.dataframe(flights, use_container_width=True)

left, right = st.columns(2)
with left:
	st.subheader("Runways")
	st.dataframe(airports, use_container_width=True)
with right:
	st.subheader("Emergencies")
	emergencies = sim.emergencies_frame()
	if emergencies.empty:
		st.info("No emergencies.")
	else:
		st.dataframe(emergencies, use_container_width=True)

st.subheader("Flight Search")
s1, s2, s3 = st.columns(3)
codes = ["all"] + list(airports["code"])
needle = s1.text_input("Flight ID")
frm = s2.selectbox("From", codes)
to = s3.selectbox("To", codes)
found = sim.search_flights(
	flight_id=needle or None,
	departure=None if frm == "all" else frm,
	arrival=None if to == "all" else to,
)
st.dataframe(pd.DataFrame([f.to_dict() for f in found]), use_container_width=True)

if live:
	time.sleep(sim.config.tick_seconds)
	st.rerun()
