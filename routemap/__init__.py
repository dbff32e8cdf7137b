"""routemap: interactive marker/route map pages built with folium."""

__version__ = "0.1.0"
