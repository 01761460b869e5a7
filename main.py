import marimo

__generated_with = "0.18.3"
app = marimo.App()


@app.cell
def _():
    import object_plane as op
    from IPython.lib.pretty import pprint
    return op, pprint


@app.cell
def _(op):
    s = op.create_memory_object_store()
    return (s,)


@app.cell
def _(pprint, s):
    pprint(s)
    return


@app.cell
def _(s):
    s.add("k", {"v": 1})
    return


@app.cell
def _(pprint, s):
    pprint(s)
    return


@app.cell
def _(pprint, s):
    pprint(s.commit("first"))
    return


@app.cell
def _(pprint, s):
    pprint(s)
    return


@app.cell
def _(s):
    s.branch().create("dev")
    s.branch().checkout("dev")
    s.add("k", {"v": 2})
    s.commit("bump k on dev")
    print(s.branch().list().message)
    return


@app.cell
def _(s):
    print(s.log().message)
    return


if __name__ == "__main__":
    app.run()
