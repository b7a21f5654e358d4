import ezdxf

import dxfsvg


def main() -> None:
    source = ezdxf.new("R2010", setup=True)
    msp = source.modelspace()
    msp.add_line((0, 0), (40, 0))
    msp.add_linear_dim(base=(20, 8), p1=(0, 0), p2=(40, 0)).render()
    source.saveas("/tmp/dimensions.dxf")

    doc = dxfsvg.read("/tmp/dimensions.dxf")
    dims = [entity for entity in doc.entities if entity[0][1] == "DIMENSION"]
    print(f"DIMENSION count: {len(dims)}")

    scene = doc.render()
    print("bbox:", scene.bbox)

    with open("dimensions.svg", "w", encoding="utf-8") as out:
        out.write(dxfsvg.scene_to_svg(scene))
    print("saved: dimensions.svg")


if __name__ == "__main__":
    main()
