"""Share links - public proposal links and contract signing links"""
