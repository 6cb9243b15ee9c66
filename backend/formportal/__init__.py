"""Form Portal - sequential multi-party approval of student form submissions"""
