import dxfsvg


result = dxfsvg.to_svg(
    "examples/data/floor_plan.dxf",
    "/tmp/floor_plan.svg",
)
print(result)
