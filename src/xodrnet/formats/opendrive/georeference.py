"""Conversion of map coordinates to longitude and latitude.

Requires the optional pyproj dependency.
"""

#: Coordinate reference system of the longitude/latitude output.
wgs84 = 'EPSG:4326'


def _pyproj():
    try:
        import pyproj
    except ModuleNotFoundError as e:
        raise RuntimeError('geo-referencing requires pyproj to be installed') from e
    return pyproj


def transformerFor(geoReference):
    '''Build a transformer from the given PROJ string or CRS to WGS84.'''
    if not geoReference:
        raise RuntimeError('the map has no geoReference')
    pyproj = _pyproj()
    source = pyproj.CRS.from_user_input(geoReference)
    return pyproj.Transformer.from_crs(source, wgs84, always_xy=True)


def toLonLat(geoReference, x, y):
    lon, lat = transformerFor(geoReference).transform(x, y)
    return lon, lat
