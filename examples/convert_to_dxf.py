import dxfrec


records = [
    dxfrec.new("LAYER", name="WALLS", color=1),
    dxfrec.new("LINE", layer="WALLS", start=(0, 0), end=(10, 0)),
    dxfrec.new("LWPOLYLINE", layer="WALLS", vertices=[(0, 0), (10, 0), (10, 5), (0, 5)], flags=1),
]

dxfrec.write("/tmp/walls_r12.dxf", records[1:2], "R12")
doc = dxfrec.read("/tmp/walls_r12.dxf", "R12")
print(doc.records)

result = dxfrec.to_dxf(records, "/tmp/walls_out.dxf", dxf_version="R2010")
print(result)
