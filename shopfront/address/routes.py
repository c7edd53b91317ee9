# shopfront/address/routes.py
from . import bp
from ..services.provinces import ProvinceClient
from ..utils.api import ok


def _dump(items):
    return [{"code": i.code, "name": i.name} for i in items]


@bp.get("/provinces")
def provinces():
    return ok("Provinces", _dump(ProvinceClient.from_app().provinces()))


@bp.get("/provinces/<int:code>/districts")
def districts(code):
    return ok("Districts", _dump(ProvinceClient.from_app().districts(code)))


@bp.get("/districts/<int:code>/wards")
def wards(code):
    return ok("Wards", _dump(ProvinceClient.from_app().wards(code)))
