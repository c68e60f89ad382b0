"""Services: analysis provider gateway and derived stats"""
