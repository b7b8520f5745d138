from routegraph import config


def connect():
    from py2neo import Graph

    return Graph(config.NEO4J_BOLT, auth=(config.NEO4J_USER, config.NEO4J_PASS))


def push_to_neo4j(result, graph=None):
    """
    Mirror a scan into Neo4j: modules, the MOUNTS edges between them and the
    routes each module (or file, for orphan routes) DEFINES. Earlier
    routegraph nodes are replaced.
    """
    graph = graph or connect()
    graph.run("MATCH (n) WHERE n:Module OR n:Route OR n:File DETACH DELETE n")

    tx = graph.begin()
    for edge in result.edges:
        tx.run("MERGE (m:Module {file:$file, name:$name})",
               file=edge.target.file, name=edge.target.variable)
        if edge.source is None:
            tx.run("""
                MERGE (f:File {path:$path})
                MERGE (m:Module {file:$file, name:$name})
                MERGE (f)-[:MOUNTS {prefix:$prefix}]->(m)
            """, path=edge.origin_file, file=edge.target.file,
                   name=edge.target.variable, prefix=edge.prefix)
        else:
            tx.run("""
                MERGE (p:Module {file:$pfile, name:$pname})
                MERGE (m:Module {file:$file, name:$name})
                MERGE (p)-[:MOUNTS {prefix:$prefix}]->(m)
            """, pfile=edge.source.file, pname=edge.source.variable,
                   file=edge.target.file, name=edge.target.variable, prefix=edge.prefix)

    count = 0
    for path, routes in result.routes.items():
        for route in routes:
            tx.run("MERGE (rt:Route {path:$path, method:$method})", path=route.path, method=route.method)
            if route.owner:
                tx.run("""
                    MERGE (m:Module {file:$file, name:$name})
                    MERGE (rt:Route {path:$path, method:$method})
                    MERGE (m)-[:DEFINES {line:$line}]->(rt)
                """, file=path, name=route.owner, path=route.path, method=route.method, line=route.line)
            else:
                tx.run("""
                    MERGE (f:File {path:$file})
                    MERGE (rt:Route {path:$path, method:$method})
                    MERGE (f)-[:DEFINES {line:$line}]->(rt)
                """, file=path, path=route.path, method=route.method, line=route.line)
            count += 1
    graph.commit(tx)
    return f"Pushed {count} routes and {len(result.edges)} mounts to Neo4j @ {config.NEO4J_BOLT}"
