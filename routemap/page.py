"""Assemble the interactive folium page for an AppState."""

from __future__ import annotations

import json
from typing import Any, Dict, List

import folium
from folium import Element
from folium.plugins import MiniMap

from .app import AppState
from .overlays import draw_roads, draw_stations
from .view import TileSource


def _tile_layer(src: TileSource, show: bool = True) -> folium.TileLayer:
    return folium.TileLayer(tiles=src.url, attr=src.attribution, name=src.name, show=show)


def _script_json(obj: Any) -> str:
    # keep "</script>" inside strings from closing the block
    return json.dumps(obj, ensure_ascii=False).replace("</", "<\\/")


def page_config(state: AppState, base_layer: str, detail_layer: str) -> Dict[str, Any]:
    """Values the browser script needs, taken from the Python-side state."""
    cfg = state.config
    seed: List[Dict[str, Any]] = [
        {"lat": mk.lat, "lng": mk.lon, "draggable": mk.draggable, "title": mk.label}
        for mk in state.store
    ]
    return {
        "storageKey": cfg.storage_key,
        "markerLabel": cfg.marker_label,
        "locatedLabel": cfg.located_label,
        "locatedZoom": cfg.located_zoom,
        "routeColor": cfg.route_color,
        "routeWeight": cfg.route_weight,
        # a position resolved at build time is already in seedMarkers
        "geolocation": bool(cfg.browser_geolocation) and not state.located,
        "seedMarkers": seed,
        "baseLayer": base_layer,
        "detailLayer": detail_layer,
        "detailActive": state.view.is_detail,
    }


def add_ui_elements(m: folium.Map, state: AppState) -> None:
    """Distance label and the detail-map toggle button."""
    html = f"""
<button id="toggleDetailMap" type="button"
        style="position: absolute; top: 10px; left: 54px; z-index: 1000;
               padding: 4px 10px; font-size: 13px; background: #fff;
               border: 2px solid rgba(0,0,0,0.2); border-radius: 4px; cursor: pointer;">詳細地図</button>
<div id="routeDistance"
     style="position: absolute; bottom: 24px; left: 10px; z-index: 1000;
            padding: 4px 8px; font-size: 14px; background: rgba(255,255,255,0.9);
            border-radius: 4px; font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif;">{state.distance_text}</div>
""".strip()
    m.get_root().html.add_child(Element(html))


def add_interaction_js(m: folium.Map) -> None:
    """Inject marker placement, route drawing, persistence, geolocation and toggle."""
    js = r"""
<script>
(function() {
  const CFG = window.__routemapConfig;

  function getByName(name) { return window[name]; }

  // Haversine km (R = 6371)
  function haversineKm(a, b) {
    const R = 6371;
    const toRad = (d) => d * Math.PI / 180;
    const dLat = toRad(b.lat - a.lat);
    const dLon = toRad(b.lng - a.lng);
    const h = Math.sin(dLat / 2) ** 2 +
      Math.cos(toRad(a.lat)) * Math.cos(toRad(b.lat)) * Math.sin(dLon / 2) ** 2;
    return 2 * R * Math.asin(Math.sqrt(h));
  }

  // ---------- state ----------
  let markers = [];
  let routeLine = null;

  function updateRoute(map) {
    const display = document.getElementById('routeDistance');
    if (routeLine) {
      map.removeLayer(routeLine);
      routeLine = null;
    }
    if (markers.length < 2) {
      if (display) display.innerText = '';
      return;
    }
    const latlngs = markers.map(m => m.getLatLng());
    routeLine = L.polyline(latlngs, { color: CFG.routeColor, weight: CFG.routeWeight }).addTo(map);

    let total = 0;
    for (let i = 0; i < latlngs.length - 1; i++) {
      total += haversineKm(latlngs[i], latlngs[i + 1]);
    }
    if (display) display.innerText = `経路距離: ${total.toFixed(2)} km`;
  }

  function saveMarkers() {
    const data = markers.map(m => {
      const p = m.getLatLng();
      return { lat: p.lat, lng: p.lng };
    });
    try {
      localStorage.setItem(CFG.storageKey, JSON.stringify(data));
    } catch (e) {
      console.error(e);
    }
  }

  function addMarker(map, latlng, options) {
    const opts = options || {};
    const marker = L.marker(latlng, {
      draggable: opts.draggable !== false,
      title: opts.title || CFG.markerLabel,
    }).addTo(map);

    marker.on('dragend', function() {
      updateRoute(map);
      saveMarkers();
    });

    marker.on('contextmenu', function() {
      map.removeLayer(marker);
      markers = markers.filter(m => m !== marker);
      updateRoute(map);
      saveMarkers();
    });

    markers.push(marker);
    updateRoute(map);
    saveMarkers();
    return marker;
  }

  function readStoredMarkers() {
    let raw = null;
    try {
      raw = localStorage.getItem(CFG.storageKey);
    } catch (e) {
      return null;
    }
    if (raw === null) return null;
    try {
      const data = JSON.parse(raw);
      if (!Array.isArray(data)) return [];
      for (const p of data) {
        if (!p || typeof p.lat !== 'number' || typeof p.lng !== 'number') return [];
      }
      return data;
    } catch (e) {
      return [];
    }
  }

  function loadMarkers(map) {
    const stored = readStoredMarkers();
    if (stored === null) {
      for (const s of CFG.seedMarkers) {
        addMarker(map, [s.lat, s.lng], { draggable: s.draggable, title: s.title });
      }
      return;
    }
    stored.forEach(p => addMarker(map, [p.lat, p.lng], { draggable: true }));
  }

  function requestPosition(map) {
    if (!CFG.geolocation || !navigator.geolocation) return;
    let fired = false;
    navigator.geolocation.getCurrentPosition(pos => {
      if (fired) return;
      fired = true;
      const latlng = [pos.coords.latitude, pos.coords.longitude];
      map.setView(latlng, CFG.locatedZoom);
      addMarker(map, latlng, { draggable: false, title: CFG.locatedLabel });
    }, err => {
      if (fired) return;
      fired = true;
      console.log('現在地取得失敗:', err.message);
    });
  }

  function installToggle(map) {
    const base = getByName(CFG.baseLayer);
    const detail = getByName(CFG.detailLayer);
    if (!base || !detail) return;

    const active = CFG.detailActive ? detail : base;
    const inactive = CFG.detailActive ? base : detail;
    if (map.hasLayer(inactive)) map.removeLayer(inactive);
    if (!map.hasLayer(active)) map.addLayer(active);

    const btn = document.getElementById('toggleDetailMap');
    if (!btn) return;
    L.DomEvent.disableClickPropagation(btn);
    btn.onclick = function() {
      if (map.hasLayer(base)) {
        map.removeLayer(base);
        map.addLayer(detail);
      } else {
        map.removeLayer(detail);
        map.addLayer(base);
      }
    };
  }

  document.addEventListener('DOMContentLoaded', function() {
    try {
      const map = getByName(window.__foliumMapName);
      if (!map) return;

      installToggle(map);
      requestPosition(map);
      map.on('click', function(e) {
        addMarker(map, [e.latlng.lat, e.latlng.lng]);
      });
      loadMarkers(map);
    } catch (e) {
      console.error(e);
    }
  });
})();
</script>
"""
    m.get_root().html.add_child(Element(js))


# ----------------------------
# Build
# ----------------------------

def build_map(state: AppState) -> folium.Map:
    cfg = state.config
    m = folium.Map(
        location=list(state.center),
        zoom_start=state.zoom,
        tiles=None,
        control_scale=True,
    )

    base_layer = _tile_layer(state.view.base, show=not state.view.is_detail)
    base_layer.add_to(m)
    detail_layer = _tile_layer(state.view.detail, show=state.view.is_detail)
    detail_layer.add_to(m)

    MiniMap(
        tile_layer=folium.TileLayer(tiles=state.view.base.url, attr=state.view.base.attribution),
        toggle_display=True,
        minimized=False,
        position="bottomright",
        width=cfg.minimap_size,
        height=cfg.minimap_size,
    ).add_to(m)

    # static overlays: drawn once, never updated
    draw_roads(m, state.roads)
    draw_stations(m, state.stations)

    m.get_root().html.add_child(Element(f"<script>window.__foliumMapName = {_script_json(m.get_name())};</script>"))
    m.get_root().html.add_child(
        Element(
            f"<script>window.__routemapConfig = "
            f"{_script_json(page_config(state, base_layer.get_name(), detail_layer.get_name()))};</script>"
        )
    )
    add_ui_elements(m, state)
    add_interaction_js(m)
    return m


def write_map(state: AppState, out: str) -> folium.Map:
    m = build_map(state)
    m.save(out)
    return m
